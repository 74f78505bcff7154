"""Request/response schemas for KYC, role, and delete transitions."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.core.config import get_settings
from app.schemas.account import KycStatus, Role

# Structured denial reasons; callers render a message per reason.
DenialReason = Literal["self_modification", "insufficient_privilege", "last_super_admin"]

DENIAL_MESSAGES: dict[str, str] = {
    "self_modification": "You cannot change your own role or delete your own account.",
    "insufficient_privilege": "Only super admins can assign the super admin role.",
    "last_super_admin": "Cannot remove the last super admin. At least one super admin must remain.",
}


class KycUpdateRequest(BaseModel):
    """Body for setting one account's KYC status."""

    status: KycStatus


class BulkKycUpdateRequest(BaseModel):
    """Body for setting the KYC status of many accounts in one store call."""

    account_ids: list[str] = Field(
        ...,
        description="Target account ids; duplicates are collapsed. Must be non-empty.",
    )
    status: KycStatus

    @field_validator("account_ids")
    @classmethod
    def validate_account_ids(cls, v: list[str]) -> list[str]:
        limit = get_settings().BULK_KYC_MAX_IDS
        if len(v) > limit:
            raise ValueError(f"At most {limit} account ids are allowed per bulk request.")
        if any(not aid or not aid.strip() for aid in v):
            raise ValueError("account_ids must not contain empty ids")
        return [aid.strip() for aid in v]


class RoleAssignmentRequest(BaseModel):
    """Body for assigning a role to one account."""

    role: Role


class BulkKycResult(BaseModel):
    """
    Outcome of one bulk KYC call.

    updated holds exactly the ids the store confirmed; failed holds the rest.
    partial is True whenever failed is non-empty, so partial success is never reported as full.
    An id deleted while the bulk call was in flight still counts as updated (the store applied
    it) even though the in-memory set no longer holds it.
    """

    status: KycStatus
    updated: set[str] = Field(default_factory=set)
    failed: set[str] = Field(default_factory=set)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


class BulkKycResponse(BaseModel):
    """API rendering of BulkKycResult with counts and sorted ids."""

    status: KycStatus
    updated_count: int
    updated: list[str]
    failed: list[str]
    partial: bool

    @classmethod
    def from_result(cls, result: BulkKycResult) -> "BulkKycResponse":
        return cls(
            status=result.status,
            updated_count=len(result.updated),
            updated=sorted(result.updated),
            failed=sorted(result.failed),
            partial=result.partial,
        )


class BusyResponse(BaseModel):
    """Whether an (account, action) pair has an operation in flight."""

    account_id: str | None = None
    action: str
    busy: bool


class TransitionErrorDetail(BaseModel):
    """Structured error body for failed transitions."""

    code: str = Field(..., description="Error kind, e.g. permission_denied, already_in_flight.")
    reason: str | None = Field(default=None, description="Denial reason when code is permission_denied.")
    message: str
