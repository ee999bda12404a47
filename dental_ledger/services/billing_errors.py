# FILE: dental_ledger/services/billing_errors.py
from __future__ import annotations

from typing import Any, Optional


class BillingError(Exception):
    """
    Domain rejection raised by the billing services.
    Routes catch it and turn it into the error envelope; it never reaches
    the global 500 handler.
    """
    status_code: int = 400
    code: str = "BILLING_ERROR"
    default_msg: str = "Billing operation rejected"

    def __init__(self, msg: Optional[str] = None, extra: Optional[dict] = None):
        super().__init__(msg or self.default_msg)
        self.msg = msg or self.default_msg
        self.extra = extra

    def details(self) -> Any:
        return self.extra


class PatientNotFound(BillingError):
    status_code = 404
    code = "PATIENT_NOT_FOUND"
    default_msg = "Patient not found"


class ExceedsBalance(BillingError):
    status_code = 400
    code = "EXCEEDS_BALANCE"
    default_msg = "Payment amount exceeds outstanding balance"


class PaymentNotFound(BillingError):
    status_code = 404
    code = "NOT_FOUND"
    default_msg = "Payment not found"


class AlreadyInactive(BillingError):
    status_code = 409
    code = "ALREADY_INACTIVE"
    default_msg = "Payment is already deleted"


class InvalidAmount(BillingError):
    status_code = 400
    code = "INVALID_AMOUNT"
    default_msg = "Payment amount must be greater than zero"
