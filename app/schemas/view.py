"""Pydantic schemas for the filtered/searched account projection and its tab counts."""

from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.account import AccountRecord

# Filter tabs: all accounts, one per KYC status, and admins (admin or super_admin).
ViewFilter = Literal["all", "pending", "verified", "rejected", "admins"]

VIEW_FILTER_VALUES: tuple[str, ...] = ("all", "pending", "verified", "rejected", "admins")


class AccountCounts(BaseModel):
    """Per-tab counts over the full account set, independent of the active filter and search."""

    all: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    verified: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    admins: int = Field(default=0, ge=0)


class AccountProjection(BaseModel):
    """Visible accounts (store order preserved) plus tab counts."""

    filter: ViewFilter = "all"
    search: str = ""
    visible: list[AccountRecord] = Field(default_factory=list)
    counts: AccountCounts = Field(default_factory=AccountCounts)
