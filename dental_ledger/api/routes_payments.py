# FILE: dental_ledger/api/routes_payments.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.api.deps import (
    RequestContext,
    current_context,
    get_db,
    require_payment_manager,
)
from dental_ledger.api.response import err_from, ok, page_meta
from dental_ledger.schemas.payments import (
    PatientBalanceOut,
    PaymentCreateIn,
    PaymentOut,
    RecalculateOut,
)
from dental_ledger.services.billing_balances import compute_balance
from dental_ledger.services.billing_errors import BillingError
from dental_ledger.services.billing_payment_service import (
    create_payment,
    list_payments,
    recalculate_patient_ledger,
    soft_delete_payment,
)

router = APIRouter(prefix="/patients", tags=["Patient Payments"])


def _payment_out(pay) -> dict:
    return PaymentOut.model_validate(pay).model_dump(by_alias=True)


@router.get("/{patient_id}/balance")
async def patient_balance(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(current_context),
):
    try:
        bal = await compute_balance(db, ctx.tenant_id, patient_id)
    except BillingError as e:
        return err_from(e)
    return ok(PatientBalanceOut.model_validate(bal).model_dump(by_alias=True))


@router.get("/{patient_id}/payments")
async def patient_payments(
    patient_id: int,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(current_context),
):
    try:
        rows, total = await list_payments(
            db,
            tenant_id=ctx.tenant_id,
            patient_id=patient_id,
            limit=limit,
            offset=offset,
        )
    except BillingError as e:
        return err_from(e)
    return ok(
        [_payment_out(p) for p in rows],
        meta=page_meta(total, offset),
    )


@router.post("/{patient_id}/payments")
async def add_payment(
    patient_id: int,
    inp: PaymentCreateIn,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_payment_manager),
):
    try:
        pay = await create_payment(
            db,
            tenant_id=ctx.tenant_id,
            patient_id=patient_id,
            amount=inp.amount,
            date=inp.date,
            note=inp.note,
            created_by=ctx.user_id,
        )
    except BillingError as e:
        return err_from(e)
    return ok(_payment_out(pay), status_code=201)


@router.delete("/{patient_id}/payments/{payment_id}")
async def remove_payment(
    patient_id: int,
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_payment_manager),
):
    try:
        pay = await soft_delete_payment(
            db,
            tenant_id=ctx.tenant_id,
            payment_id=payment_id,
            patient_id=patient_id,
        )
    except BillingError as e:
        return err_from(e)
    return ok(_payment_out(pay))


@router.post("/{patient_id}/ledger/recalculate")
async def force_recalculate(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_payment_manager),
):
    try:
        changed = await recalculate_patient_ledger(db,
                                                   tenant_id=ctx.tenant_id,
                                                   patient_id=patient_id)
    except BillingError as e:
        return err_from(e)
    return ok(
        RecalculateOut(patient_id=patient_id,
                       changed=changed).model_dump(by_alias=True))
