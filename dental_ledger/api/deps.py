# dental_ledger/api/deps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from dental_ledger.core.config import settings
from dental_ledger.db import session as db_session
from dental_ledger.models.tenant import Tenant
from dental_ledger.utils.jwt import decode_token


# =========================================================
# DB (per request)
# =========================================================
async def get_db() -> AsyncIterator[AsyncSession]:
    async with db_session.SessionLocal() as db:
        yield db


# =========================================================
# AUTH CONTEXT
# =========================================================
@dataclass(frozen=True)
class RequestContext:
    tenant_id: int
    user_id: Optional[int]
    role: str


def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _int_or_none(v) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


async def current_context(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    raw = _extract_bearer(authorization)
    if not raw:
        raise HTTPException(status_code=401, detail="Missing token")

    payload = decode_token(raw)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    tenant_id = _int_or_none(payload.get("tid"))
    if tenant_id is None:
        raise HTTPException(status_code=401, detail="Missing tenant in token")

    tenant = await db.get(Tenant, tenant_id)
    if not tenant:
        raise HTTPException(status_code=403, detail="Tenant not found")
    if not tenant.is_active:
        raise HTTPException(status_code=403, detail="Tenant inactive")

    return RequestContext(
        tenant_id=tenant_id,
        user_id=_int_or_none(payload.get("sub")),
        role=str(payload.get("role") or "").upper(),
    )


def require_payment_manager(
    ctx: RequestContext = Depends(current_context),
) -> RequestContext:
    if ctx.role not in settings.PAYMENT_MANAGER_ROLES:
        raise HTTPException(
            status_code=403,
            detail="You do not have permission to manage payments",
        )
    return ctx
