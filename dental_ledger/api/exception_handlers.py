# FILE: dental_ledger/api/exception_handlers.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dental_ledger.api.response import err
from dental_ledger.core.config import settings
from dental_ledger.services.error_logger import format_exception, log_error

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # exc.detail can be str/dict/list
        msg = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return err(msg=msg, status_code=exc.status_code, code=f"HTTP_{exc.status_code}")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [{
            "loc": list(e.get("loc", ())),
            "msg": e.get("msg"),
        } for e in exc.errors()]
        return err(
            msg="Validation error",
            status_code=422,
            code="VALIDATION_ERROR",
            details=jsonable_encoder(details),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        endpoint = f"{request.method} {request.url.path}"
        logger.exception("Unhandled error on %s", endpoint)
        if settings.PERSIST_ERROR_LOGS:
            await log_error(
                description=str(exc) or exc.__class__.__name__,
                endpoint=endpoint,
                module=getattr(request.scope.get("endpoint"), "__module__", None),
                function=getattr(request.scope.get("endpoint"), "__name__", None),
                http_status=500,
                stack_trace=format_exception(exc),
            )
        # no internal detail in the response
        return err(msg="Internal server error", status_code=500, code="INTERNAL_ERROR")
