# FILE: dental_ledger/api/response.py
"""
Response envelope for every ledger endpoint.

    success: {"ok": true, "data": ..., "meta": {...}}
    failure: {"ok": false, "error": {"msg": ..., "code": ..., "details": ...}}
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from dental_ledger.services.billing_errors import BillingError


def _send(payload: Dict[str, Any], status_code: int) -> JSONResponse:
    # Decimal amounts and datetimes go through jsonable_encoder
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def ok(
    data: Any = None,
    *,
    meta: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> JSONResponse:
    payload: Dict[str, Any] = {"ok": True, "data": data}
    if meta is not None:
        payload["meta"] = meta
    return _send(payload, status_code)


def err(
    msg: str = "Something went wrong",
    *,
    status_code: int = 400,
    code: Optional[str] = None,
    details: Any = None,
) -> JSONResponse:
    return _send(
        {
            "ok": False,
            "error": {
                "msg": msg,
                "code": code,
                "details": details
            },
        },
        status_code,
    )


def err_from(e: BillingError) -> JSONResponse:
    """Billing rejection -> envelope, keeping the error's own status and code."""
    return err(e.msg, status_code=e.status_code, code=e.code, details=e.details())


def page_meta(total: int, offset: int) -> Dict[str, Any]:
    return {"total": int(total), "offset": int(offset)}
