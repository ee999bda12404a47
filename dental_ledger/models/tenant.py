# dental_ledger/models/tenant.py
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from dental_ledger.db.base import Base


class Tenant(Base):
    """
    Clinic account. Owned by the tenant-management service; this service
    only reads it to reject tokens of unknown / deactivated clinics.
    """
    __tablename__ = "tenants"
    __table_args__ = {
        "mysql_engine": "InnoDB",
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), nullable=False)
    slug = Column(String(64), nullable=False, unique=True, index=True)
    currency = Column(String(8), nullable=False, default="USD")

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
