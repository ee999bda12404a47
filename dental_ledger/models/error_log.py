from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Text,
    JSON,
)

from dental_ledger.db.base import Base


class ErrorLog(Base):
    """
    Unhandled server errors, one row per failed request.
    """
    __tablename__ = "error_logs"
    __table_args__ = {
        "mysql_engine": "InnoDB",
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id = Column(Integer, primary_key=True, index=True)

    description = Column(String(1000), nullable=True)

    # where it happened
    endpoint = Column(String(255), nullable=True)  # e.g. "POST /api/patients/7/payments"
    module = Column(String(255), nullable=True)
    function = Column(String(255), nullable=True)

    http_status = Column(Integer, nullable=True)
    tenant_id = Column(Integer, nullable=True)

    request_payload = Column(JSON, nullable=True)
    stack_trace = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
