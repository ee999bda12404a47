# dental_ledger/models/__init__.py
from .tenant import Tenant
from .patient import Patient
from .appointment import Appointment
from .labwork import LabWork
from .payment import PatientPayment
from .error_log import ErrorLog

__all__ = [
    "Tenant",
    "Patient",
    "Appointment",
    "LabWork",
    "PatientPayment",
    "ErrorLog",
]
