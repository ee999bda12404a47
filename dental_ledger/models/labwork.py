# dental_ledger/models/labwork.py
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


class LabWork(Base):
    __tablename__ = "labworks"
    __table_args__ = (
        Index("ix_labworks_patient_billing", "tenant_id", "patient_id",
              "is_active", "date"),
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
    # lab work may be ordered without a patient (stock prosthetics etc.)
    patient_id = Column(Integer,
                        ForeignKey("patients.id", ondelete="SET NULL"),
                        nullable=True,
                        index=True)

    lab = Column(String(191), nullable=False)
    phone_number = Column(String(20), nullable=True)
    date = Column(DateTime, nullable=False)
    note = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_paid = Column(Boolean, default=False, nullable=False)
    is_delivered = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(
        DateTime,
        onupdate=func.now(),
        server_default=func.now(),
    )
