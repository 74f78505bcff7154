"""Pydantic request/response schemas."""

from app.schemas.account import (
    AccountRecord,
    Actor,
    AdminCounts,
    KycStatus,
    Role,
)
from app.schemas.documents import DocumentListing, DocumentRef
from app.schemas.health import HealthResponse
from app.schemas.transitions import (
    BulkKycResponse,
    BulkKycResult,
    BulkKycUpdateRequest,
    DenialReason,
    KycUpdateRequest,
    RoleAssignmentRequest,
)
from app.schemas.view import AccountCounts, AccountProjection, ViewFilter

__all__ = [
    "AccountCounts",
    "AccountProjection",
    "AccountRecord",
    "Actor",
    "AdminCounts",
    "BulkKycResponse",
    "BulkKycResult",
    "BulkKycUpdateRequest",
    "DenialReason",
    "DocumentListing",
    "DocumentRef",
    "HealthResponse",
    "KycStatus",
    "KycUpdateRequest",
    "Role",
    "RoleAssignmentRequest",
    "ViewFilter",
]
