# FILE: dental_ledger/services/billing_balances.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.models.appointment import Appointment
from dental_ledger.models.labwork import LabWork
from dental_ledger.models.patient import Patient
from dental_ledger.models.payment import PatientPayment
from dental_ledger.services.billing_errors import PatientNotFound
from dental_ledger.services.billing_items import (
    appointment_filters,
    labwork_filters,
)
from dental_ledger.services.billing_math import ZERO, money2


@dataclass(frozen=True)
class PatientBalance:
    total_debt: Decimal
    total_paid: Decimal
    outstanding: Decimal


async def get_active_patient(
    db: AsyncSession,
    tenant_id: int,
    patient_id: int,
    *,
    for_update: bool = False,
) -> Optional[Patient]:
    """
    Tenant-scoped lookup; a patient id valid in another tenant never resolves.
    for_update takes a row lock (ignored by sqlite).
    """
    stmt = select(Patient).where(
        Patient.id == int(patient_id),
        Patient.tenant_id == int(tenant_id),
        Patient.is_active.is_(True),
    )
    if for_update:
        stmt = stmt.with_for_update()
    return (await db.execute(stmt)).scalars().first()


async def total_paid_for_patient(db: AsyncSession, tenant_id: int,
                                 patient_id: int) -> Decimal:
    """Sum of active payments; soft-deleted rows count zero."""
    total = (await db.execute(
        select(func.coalesce(func.sum(PatientPayment.amount), 0)).where(
            PatientPayment.tenant_id == int(tenant_id),
            PatientPayment.patient_id == int(patient_id),
            PatientPayment.is_active.is_(True),
        ))).scalar()
    return money2(total)


async def total_debt_for_patient(db: AsyncSession, tenant_id: int,
                                 patient_id: int) -> Decimal:
    # aggregates over the collector's filters; no allocation needed
    appt = (await db.execute(
        select(func.coalesce(func.sum(Appointment.cost), 0)).where(
            *appointment_filters(tenant_id, patient_id)))).scalar()
    lab = (await db.execute(
        select(func.coalesce(func.sum(LabWork.price), 0)).where(
            *labwork_filters(tenant_id, patient_id)))).scalar()
    return money2(money2(appt) + money2(lab))


def make_balance(total_debt: Decimal, total_paid: Decimal) -> PatientBalance:
    outstanding = money2(total_debt) - money2(total_paid)
    if outstanding < 0:
        # overpayment: settled account, residual credit is not carried
        outstanding = ZERO
    return PatientBalance(
        total_debt=money2(total_debt),
        total_paid=money2(total_paid),
        outstanding=money2(outstanding),
    )


async def compute_balance(db: AsyncSession, tenant_id: int,
                          patient_id: int) -> PatientBalance:
    """
    totalDebt / totalPaid / outstanding (clamped at zero) for one patient.
    Raises PatientNotFound if the patient is unknown, inactive or belongs
    to another tenant.
    """
    patient = await get_active_patient(db, tenant_id, patient_id)
    if not patient:
        raise PatientNotFound()

    total_debt = await total_debt_for_patient(db, tenant_id, patient_id)
    total_paid = await total_paid_for_patient(db, tenant_id, patient_id)
    return make_balance(total_debt, total_paid)
