"""Pydantic schemas for KYC document references and owner-gated listings."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DocumentType = Literal["id_proof", "address_proof", "selfie"]

# Why a listing is unavailable; distinct from an available-but-empty listing.
UnavailableReason = Literal["owner_only"]


class DocumentRef(BaseModel):
    """Reference to one stored KYC document."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: str
    document_type: DocumentType
    url: str
    uploaded_at: datetime | None = None


class DocumentListing(BaseModel):
    """
    Result of a document fetch.

    available=False means access was restricted (documents is always empty then);
    available=True with an empty list means nothing has been uploaded.
    """

    account_id: str
    available: bool
    documents: list[DocumentRef] = Field(default_factory=list)
    reason: UnavailableReason | None = None
    message: str | None = None
