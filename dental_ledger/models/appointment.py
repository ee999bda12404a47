# dental_ledger/models/appointment.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from dental_ledger.db.base import Base


class Appointment(Base):
    """
    Scheduled visit. `cost` makes it billable; `is_paid` is owned by the
    ledger recalculation and is never written by appointment CRUD.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_patient_billing", "tenant_id", "patient_id",
              "is_active", "start_time"),
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
    doctor_id = Column(Integer, nullable=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="SCHEDULED")
    type = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    cost = Column(Numeric(10, 2), nullable=True)
    is_paid = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(
        DateTime,
        onupdate=func.now(),
        server_default=func.now(),
    )
