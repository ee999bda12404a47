# dental_ledger/models/payment.py
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
)

from dental_ledger.db.base import Base


class PatientPayment(Base):
    """
    Money received from a patient. Not tied to any single appointment or
    lab work: the ledger spreads the active total over billables oldest-first.

    Rows are never deleted; `is_active = False` is the soft delete.
    """
    __tablename__ = "patient_payments"
    __table_args__ = (
        Index("ix_patient_payments_patient_active", "tenant_id",
              "patient_id", "is_active"),
        {
            "mysql_engine": "InnoDB",
            "mysql_charset": "utf8mb4",
            "mysql_collate": "utf8mb4_unicode_ci",
        },
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer,
                       ForeignKey("tenants.id", ondelete="CASCADE"),
                       nullable=False,
                       index=True)
    patient_id = Column(Integer,
                        ForeignKey("patients.id", ondelete="CASCADE"),
                        nullable=False,
                        index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    note = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)  # user id from token

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow,
                        nullable=False)
