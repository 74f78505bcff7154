"""Health check endpoint with database connectivity and transition engine state."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import peek_transition_engine
from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health, database connectivity, and whether the account set is loaded.
    Does not trigger a load; used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    engine = peek_transition_engine()

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        accounts_loaded=engine.loaded,
        in_flight=len(engine.busy_keys()),
    )
