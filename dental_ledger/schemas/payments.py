# FILE: dental_ledger/schemas/payments.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dental_ledger.services.billing_math import money2


class PaymentCreateIn(BaseModel):
    amount: Decimal
    date: datetime
    note: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("amount")
    def positive_amount(cls, v: Decimal) -> Decimal:
        v = money2(v)
        if v <= 0:
            raise ValueError("Amount must be greater than zero.")
        return v

    @field_validator("date")
    def naive_utc(cls, v: datetime) -> datetime:
        # stored columns are naive UTC
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @field_validator("note")
    def blank_note(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int = Field(serialization_alias="tenantId")
    patient_id: int = Field(serialization_alias="patientId")
    amount: Decimal
    date: datetime
    note: Optional[str] = None
    created_by: Optional[int] = Field(default=None,
                                      serialization_alias="createdBy")
    is_active: bool = Field(serialization_alias="isActive")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class PatientBalanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_debt: Decimal = Field(serialization_alias="totalDebt")
    total_paid: Decimal = Field(serialization_alias="totalPaid")
    outstanding: Decimal


class RecalculateOut(BaseModel):
    patient_id: int = Field(serialization_alias="patientId")
    changed: int
