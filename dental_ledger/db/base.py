# dental_ledger/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All tables (tenants, patients, billables, payments, error logs) inherit from this."""
    pass
