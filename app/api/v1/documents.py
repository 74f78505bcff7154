"""KYC document listing endpoint (owner-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_document_source
from app.api.v1.auth import get_current_actor, to_actor
from app.schemas.auth import CurrentActor
from app.schemas.documents import DocumentListing
from app.services.documents import DocumentSource, fetch_documents
from app.services.errors import StoreUnavailableError

router = APIRouter()


@router.get("/{account_id}", response_model=DocumentListing)
async def get_documents(
    account_id: str,
    current: Annotated[CurrentActor, Depends(get_current_actor)],
    source: Annotated[DocumentSource, Depends(get_document_source)],
) -> DocumentListing:
    """
    List KYC documents for an account.

    Only the account owner gets the documents; for anyone else the response has
    available=false and reason=owner_only (not an error, and not an empty listing).
    """
    try:
        return await fetch_documents(to_actor(current), account_id, source)
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e
