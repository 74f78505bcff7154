"""Process-wide service wiring for API dependencies."""

from functools import lru_cache

from fastapi import HTTPException, status

from app.core.database import SessionLocal
from app.services.account_store import SqlAccountStore
from app.services.documents import DocumentSource, SqlDocumentSource
from app.services.errors import StoreUnavailableError
from app.services.transitions import TransitionEngine


@lru_cache
def _engine_singleton() -> TransitionEngine:
    """One engine per process: it owns the in-memory account set and lock table."""
    return TransitionEngine(SqlAccountStore(SessionLocal))


async def get_transition_engine() -> TransitionEngine:
    """Dependency: the shared engine, loaded from the store on first use."""
    engine = _engine_singleton()
    if not engine.loaded:
        try:
            await engine.refresh()
        except StoreUnavailableError as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=e.message,
            ) from e
    return engine


def get_document_source() -> DocumentSource:
    return SqlDocumentSource(SessionLocal)


def peek_transition_engine() -> TransitionEngine:
    """The shared engine without triggering a load (for health checks)."""
    return _engine_singleton()
