# dental_ledger/utils/jwt.py
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from dental_ledger.core.config import settings


def create_access_token(
    *,
    subject: str,
    tenant_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Token layout shared with the auth service:
    sub = user id, tid = tenant id, role = tenant role (ADMIN, STAFF, ...).
    """
    now = datetime.utcnow()
    delta = expires_delta or timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(subject),
        "tid": int(tenant_id),
        "role": (role or "").upper(),
        "iat": now,
        "exp": now + delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_token(raw_token: str) -> Optional[dict]:
    try:
        return jwt.decode(raw_token,
                          settings.JWT_SECRET,
                          algorithms=[settings.JWT_ALG])
    except JWTError:
        return None
