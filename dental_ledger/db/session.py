# dental_ledger/db/session.py
from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from dental_ledger.core.config import settings


def _engine_kwargs(db_uri: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }
    # sqlite (tests / local dev) does not take queue-pool sizing
    if not db_uri.startswith("sqlite"):
        kwargs.update(
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    return kwargs


def make_engine(db_uri: str) -> AsyncEngine:
    return create_async_engine(db_uri, **_engine_kwargs(db_uri))


def make_sessionmaker(eng: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows returned from services stay readable
    # after commit without a lazy (sync) refresh
    return async_sessionmaker(
        bind=eng,
        autoflush=False,
        expire_on_commit=False,
    )


engine: AsyncEngine = make_engine(settings.SQLALCHEMY_DATABASE_URI)

SessionLocal = make_sessionmaker(engine)
