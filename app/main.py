"""FastAPI application entrypoint for the account directory admin API. Wiring and middleware only."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.logging import configure_logging

configure_logging(settings)
logger = logging.getLogger(__name__)

APP_TITLE = "Directory Admin API"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # The account set loads lazily on the first /accounts request.
    logger.info(
        "Starting %s",
        APP_TITLE,
        extra={"environment": settings.APP_ENV, "auth_enabled": settings.AUTH_ENABLED},
    )
    if not settings.AUTH_ENABLED:
        logger.warning("AUTH_ENABLED is false; every request acts as the dev super admin")
    yield


app = FastAPI(
    title=APP_TITLE,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": APP_TITLE}
