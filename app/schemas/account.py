"""Pydantic schemas for directory accounts: KYC status, role, and the in-memory account record."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Identity-verification lifecycle. No ordering is enforced between values.
KycStatus = Literal["pending", "verified", "rejected"]

KYC_STATUS_VALUES: frozenset[str] = frozenset({"pending", "verified", "rejected"})

# Privilege tiers, lowest to highest capability.
Role = Literal["user", "admin", "super_admin"]

ROLE_VALUES: frozenset[str] = frozenset({"user", "admin", "super_admin"})

# Roles allowed to use the admin console at all.
ADMIN_ROLES: frozenset[str] = frozenset({"admin", "super_admin"})

SUPER_ADMIN: Role = "super_admin"


class AccountRecord(BaseModel):
    """
    Authoritative in-memory view of one account.

    Frozen: the transition engine replaces entries with model_copy(update=...) patches
    rather than mutating them, so a patch can only touch the fields it names.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Opaque, stable account identifier.")
    name: str = Field(default="", description="Display name.")
    email: str = Field(default="", description="Contact email (searchable).")
    phone: str = Field(default="", description="Contact phone (searchable, not case-folded).")
    kyc_status: KycStatus = Field(default="pending", description="Identity-verification status.")
    role: Role = Field(default="user", description="Privilege tier.")
    role_assigned_by: str | None = Field(
        default=None,
        description="Id of the actor who last changed role; None if never changed.",
    )
    role_assigned_at: datetime | None = Field(
        default=None,
        description="Timestamp of the last role change; None if never changed.",
    )
    created_at: datetime | None = Field(
        default=None,
        description="Creation timestamp, set by the registration flow.",
    )
    portfolio_count: int = Field(default=0, ge=0, description="Observed portfolio count (read-only).")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class Actor(BaseModel):
    """Authenticated identity performing an action (id, role)."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role


class AdminCounts(BaseModel):
    """Live admin and super admin counts from the account store."""

    admins: int = Field(..., ge=0)
    super_admins: int = Field(..., ge=0)
