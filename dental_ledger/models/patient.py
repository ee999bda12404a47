# dental_ledger/models/patient.py
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)

from dental_ledger.db.base import Base


class Patient(Base):
    __tablename__ = "patients"
    __table_args__ = (
        Index("ix_patients_tenant_active", "tenant_id", "is_active"),
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

    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    email = Column(String(191), nullable=True)
    phone = Column(String(20), nullable=True)
    dob = Column(Date, nullable=True)

    # status (soft delete)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(
        DateTime,
        onupdate=func.now(),
        server_default=func.now(),
    )
