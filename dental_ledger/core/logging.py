# dental_ledger/core/logging.py
import logging
from typing import Optional

from dental_ledger.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install one stream handler on the root logger.
    Safe to call more than once (uvicorn reloads, tests).
    """
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if any(getattr(h, "_dental_ledger", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._dental_ledger = True  # type: ignore[attr-defined]
    root.addHandler(handler)
