# dental_ledger/services/error_logger.py
from typing import Any, Dict, Optional
import logging
import traceback

from sqlalchemy.exc import SQLAlchemyError

from dental_ledger.db import session as db_session
from dental_ledger.models.error_log import ErrorLog

logger = logging.getLogger(__name__)


async def log_error(
    *,
    description: Optional[str] = None,
    endpoint: Optional[str] = None,
    module: Optional[str] = None,
    function: Optional[str] = None,
    http_status: Optional[int] = None,
    tenant_id: Optional[int] = None,
    request_payload: Optional[Dict[str, Any]] = None,
    stack_trace: Optional[str] = None,
) -> None:
    """
    Persist an error into error_logs using a fresh session (the request's
    session may be the thing that failed). Never raises.
    """
    async with db_session.SessionLocal() as db:
        try:
            db.add(
                ErrorLog(
                    description=(description or "")[:1000] or None,
                    endpoint=endpoint,
                    module=module,
                    function=function,
                    http_status=http_status,
                    tenant_id=tenant_id,
                    request_payload=request_payload,
                    stack_trace=stack_trace,
                ))
            await db.commit()
        except SQLAlchemyError:
            # last resort – never raise from logger
            await db.rollback()
            logger.exception("Failed to persist error log")


def format_exception(exc: BaseException) -> str:
    return "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__))
