import os

# must be set before dental_ledger.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from dental_ledger.db import session as db_session
from dental_ledger.db.init_db import init_models
from dental_ledger.models import (
    Appointment,
    LabWork,
    Patient,
    PatientPayment,
    Tenant,
)
from dental_ledger.utils.jwt import create_access_token


@pytest.fixture
async def engine(tmp_path):
    eng = db_session.make_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    factory = db_session.make_sessionmaker(engine)
    # request sessions and the error logger both resolve SessionLocal at call time
    monkeypatch.setattr(db_session, "SessionLocal", factory)
    return factory


@pytest.fixture
async def db(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def tenant(db):
    return await add_tenant(db, slug="clinic-a")


@pytest.fixture
async def other_tenant(db):
    return await add_tenant(db, slug="clinic-b")


@pytest.fixture
async def patient(db, tenant):
    return await add_patient(db, tenant)


@pytest.fixture
async def client(session_factory):
    from dental_ledger.main import app

    async with AsyncClient(transport=ASGITransport(app=app),
                           base_url="http://test") as c:
        yield c


# -------------------------
# seed helpers
# -------------------------
async def _save(db, obj):
    db.add(obj)
    await db.commit()
    return obj


async def add_tenant(db, slug: str, is_active: bool = True) -> Tenant:
    return await _save(db, Tenant(name=slug.title(), slug=slug, is_active=is_active))


async def add_patient(db, tenant: Tenant, is_active: bool = True, **kw) -> Patient:
    return await _save(
        db,
        Patient(
            tenant_id=tenant.id,
            first_name=kw.get("first_name", "Ana"),
            last_name=kw.get("last_name", "Lopez"),
            is_active=is_active,
        ))


async def add_appointment(db, patient: Patient, cost, when: datetime,
                          is_paid: bool = False, is_active: bool = True) -> Appointment:
    return await _save(
        db,
        Appointment(
            tenant_id=patient.tenant_id,
            patient_id=patient.id,
            start_time=when,
            end_time=when.replace(minute=30),
            status="COMPLETED",
            cost=None if cost is None else Decimal(str(cost)),
            is_paid=is_paid,
            is_active=is_active,
        ))


async def add_labwork(db, patient: Patient, price, when: datetime,
                      is_paid: bool = False, is_active: bool = True) -> LabWork:
    return await _save(
        db,
        LabWork(
            tenant_id=patient.tenant_id,
            patient_id=patient.id,
            lab="Crown Lab",
            date=when,
            price=Decimal(str(price)),
            is_paid=is_paid,
            is_active=is_active,
        ))


async def add_payment_row(db, patient: Patient, amount, when: datetime,
                          is_active: bool = True) -> PatientPayment:
    """Raw insert, bypassing the balance check (e.g. to build an overpaid account)."""
    return await _save(
        db,
        PatientPayment(
            tenant_id=patient.tenant_id,
            patient_id=patient.id,
            amount=Decimal(str(amount)),
            date=when,
            is_active=is_active,
        ))


async def paid_flags(db, model):
    """Stored is_paid by id, read straight from the table."""
    rows = (await db.execute(select(model.id, model.is_paid).order_by(model.id))).all()
    return {r.id: r.is_paid for r in rows}


def token_for(tenant: Tenant, role: str = "ADMIN", user_id: int = 1) -> dict:
    tok = create_access_token(subject=str(user_id), tenant_id=tenant.id, role=role)
    return {"Authorization": f"Bearer {tok}"}
