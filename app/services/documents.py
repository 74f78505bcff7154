"""KYC document listing, gated to the document owner.

Documents are only listed for the account matching the authenticated identity. For any other
account the result is an explicit not-available listing, never an error and never an empty list
that could be mistaken for "nothing uploaded".
"""

import logging
from collections.abc import Callable
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import KycDocument
from app.schemas.account import Actor
from app.schemas.documents import DocumentListing, DocumentRef
from app.services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

OWNER_ONLY_MESSAGE = (
    "KYC documents can only be viewed by the document owner. "
    "This account holder needs to sign in to view their documents."
)


class DocumentSource(Protocol):
    """Read side of the external document storage pipeline."""

    async def list_documents(self, account_id: str) -> list[DocumentRef]:
        ...


class SqlDocumentSource:
    """DocumentSource backed by the kyc_documents table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    async def list_documents(self, account_id: str) -> list[DocumentRef]:
        def _call() -> list[DocumentRef]:
            session = self._session_factory()
            try:
                rows = (
                    session.query(KycDocument)
                    .filter(KycDocument.account_id == account_id)
                    .order_by(KycDocument.uploaded_at, KycDocument.id)
                    .all()
                )
                return [DocumentRef.model_validate(row) for row in rows]
            except SQLAlchemyError as e:
                raise StoreUnavailableError(
                    "Document store unavailable.", cause=e
                ) from e
            finally:
                session.close()

        return await run_in_threadpool(_call)


async def fetch_documents(
    actor: Actor, account_id: str, source: DocumentSource
) -> DocumentListing:
    """Return the owner's documents, or a not-available listing for anyone else's account."""
    if actor.id != account_id:
        logger.info(
            "Document listing not available for non-owner",
            extra={"actor_id": actor.id, "account_id": account_id},
        )
        return DocumentListing(
            account_id=account_id,
            available=False,
            reason="owner_only",
            message=OWNER_ONLY_MESSAGE,
        )
    documents = await source.list_documents(account_id)
    return DocumentListing(account_id=account_id, available=True, documents=documents)
