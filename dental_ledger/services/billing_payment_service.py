# FILE: dental_ledger/services/billing_payment_service.py
"""
Payment lifecycle: the only entry points that change a patient's payments.

Each mutation runs, under the patient's lock, as one transaction:
validate -> write payment row -> recalculate paid flags -> commit.
Any failure rolls back the payment row together with the flags.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.core.config import settings
from dental_ledger.models.payment import PatientPayment
from dental_ledger.services.billing_balances import (
    compute_balance,
    get_active_patient,
)
from dental_ledger.services.billing_errors import (
    AlreadyInactive,
    ExceedsBalance,
    InvalidAmount,
    PatientNotFound,
    PaymentNotFound,
)
from dental_ledger.services.billing_ledger import recalculate_paid_status
from dental_ledger.services.billing_math import money2
from dental_ledger.services.patient_locks import patient_locks

logger = logging.getLogger(__name__)


async def _end_open_transaction(db: AsyncSession) -> None:
    """
    Close whatever the session already read (e.g. the tenant lookup) so the
    balance is read in a transaction that starts after the patient lock.
    Under REPEATABLE READ an earlier read would pin an older snapshot.
    """
    if db.in_transaction():
        await db.commit()


async def create_payment(
    db: AsyncSession,
    *,
    tenant_id: int,
    patient_id: int,
    amount: Decimal,
    date: datetime,
    note: Optional[str] = None,
    created_by: Optional[int] = None,
) -> PatientPayment:
    amount = money2(amount)
    if amount <= 0:
        logger.warning("Payment rejected tenant_id=%s patient_id=%s amount=%s not positive",
                       tenant_id, patient_id, amount)
        raise InvalidAmount(extra={"amount": str(amount)})

    await _end_open_transaction(db)
    async with patient_locks.hold(tenant_id, patient_id):
        try:
            patient = await get_active_patient(db,
                                               tenant_id,
                                               patient_id,
                                               for_update=True)
            if not patient:
                raise PatientNotFound()

            # fresh balance, read after the patient lock is held
            bal = await compute_balance(db, tenant_id, patient_id)
            if amount > bal.outstanding:
                logger.warning(
                    "Payment rejected tenant_id=%s patient_id=%s amount=%s outstanding=%s",
                    tenant_id, patient_id, amount, bal.outstanding)
                raise ExceedsBalance(
                    f"Payment amount {amount} exceeds outstanding balance {bal.outstanding}",
                    extra={"outstanding": str(bal.outstanding)},
                )

            pay = PatientPayment(
                tenant_id=int(tenant_id),
                patient_id=int(patient_id),
                amount=amount,
                date=date,
                note=(note or None),
                created_by=created_by,
                is_active=True,
            )
            db.add(pay)
            await db.flush()

            await recalculate_paid_status(db, tenant_id, patient_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    await db.refresh(pay)
    logger.info("Payment created payment_id=%s tenant_id=%s patient_id=%s amount=%s",
                pay.id, tenant_id, patient_id, amount)
    return pay


async def _get_payment(db: AsyncSession,
                       tenant_id: int,
                       payment_id: int,
                       *,
                       for_update: bool = False) -> Optional[PatientPayment]:
    stmt = select(PatientPayment).where(
        PatientPayment.id == int(payment_id),
        PatientPayment.tenant_id == int(tenant_id),
    )
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return (await db.execute(stmt)).scalars().first()


async def soft_delete_payment(
    db: AsyncSession,
    *,
    tenant_id: int,
    payment_id: int,
    patient_id: Optional[int] = None,
) -> PatientPayment:
    """
    Flip is_active to False and re-run allocation for the owning patient.
    Deleting twice is an error (AlreadyInactive), not a no-op.
    When patient_id is given, a payment of another patient is NotFound.
    """
    pay = await _get_payment(db, tenant_id, payment_id)
    if not pay or (patient_id is not None
                   and int(pay.patient_id) != int(patient_id)):
        await db.rollback()
        raise PaymentNotFound()
    owner_id = int(pay.patient_id)

    await _end_open_transaction(db)
    async with patient_locks.hold(tenant_id, owner_id):
        try:
            await get_active_patient(db, tenant_id, owner_id, for_update=True)
            # re-read under the lock: a concurrent delete may have won
            pay = await _get_payment(db, tenant_id, payment_id, for_update=True)
            if not pay:
                raise PaymentNotFound()
            if not pay.is_active:
                logger.warning("Payment already inactive payment_id=%s tenant_id=%s",
                               payment_id, tenant_id)
                raise AlreadyInactive()

            pay.is_active = False
            await db.flush()

            await recalculate_paid_status(db, tenant_id, owner_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    await db.refresh(pay)
    logger.info("Payment soft deleted payment_id=%s tenant_id=%s patient_id=%s",
                payment_id, tenant_id, owner_id)
    return pay


async def list_payments(
    db: AsyncSession,
    *,
    tenant_id: int,
    patient_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[PatientPayment], int]:
    """Active payments, newest first, plus the active total count."""
    patient = await get_active_patient(db, tenant_id, patient_id)
    if not patient:
        raise PatientNotFound()

    limit = min(int(limit or settings.PAYMENTS_PAGE_SIZE),
                settings.PAYMENTS_MAX_PAGE_SIZE)
    where = (
        PatientPayment.tenant_id == int(tenant_id),
        PatientPayment.patient_id == int(patient_id),
        PatientPayment.is_active.is_(True),
    )

    rows = (await db.execute(
        select(PatientPayment).where(*where).order_by(
            PatientPayment.date.desc(),
            PatientPayment.id.desc()).limit(limit).offset(
                max(int(offset or 0), 0)))).scalars().all()
    total = (await db.execute(
        select(func.count(PatientPayment.id)).where(*where))).scalar() or 0
    return list(rows), int(total)


async def recalculate_patient_ledger(db: AsyncSession, *, tenant_id: int,
                                     patient_id: int) -> int:
    """Forced recalculation (repair after billable edits); returns flags changed."""
    await _end_open_transaction(db)
    async with patient_locks.hold(tenant_id, patient_id):
        try:
            patient = await get_active_patient(db,
                                               tenant_id,
                                               patient_id,
                                               for_update=True)
            if not patient:
                raise PatientNotFound()
            changed = await recalculate_paid_status(db, tenant_id, patient_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    return changed
