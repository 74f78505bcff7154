"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import accounts, auth, documents, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
router.include_router(documents.router, prefix="/documents", tags=["documents"])
