"""Account store: the durable record of all accounts, behind an async protocol.

The transition engine only talks to AccountStore. SqlAccountStore is the PostgreSQL
implementation; each call opens its own session, commits, and closes, and runs the blocking
SQLAlchemy work in the threadpool so the event loop keeps serving other requests.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Account
from app.schemas.account import AccountRecord, KycStatus, Role
from app.services.errors import AccountNotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BulkUpdateOutcome:
    """What the store applied for one bulk call: confirmed ids and ids it could not update."""

    updated: set[str] = field(default_factory=set)
    failed: set[str] = field(default_factory=set)


class AccountStore(Protocol):
    """Interface for the durable account record."""

    async def list_all(self) -> list[AccountRecord]:
        """Return every account in stable (creation) order."""
        ...

    async def update_kyc(self, account_id: str, status: KycStatus) -> None:
        """Set one account's KYC status. Raises AccountNotFoundError if absent."""
        ...

    async def bulk_update_kyc(
        self, account_ids: Iterable[str], status: KycStatus
    ) -> BulkUpdateOutcome:
        """Set KYC status for many accounts in one call and report per-id outcome."""
        ...

    async def update_role(
        self, account_id: str, role: Role, assigned_by: str, assigned_at: datetime
    ) -> None:
        """Set role together with role_assigned_by and role_assigned_at."""
        ...

    async def delete_account(self, account_id: str) -> None:
        """Hard delete. Raises AccountNotFoundError if absent."""
        ...

    async def count_by_role(self, role: Role) -> int:
        """Live count of accounts holding role (latest committed state)."""
        ...


class SqlAccountStore:
    """AccountStore backed by the accounts table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    async def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        """Run work in a fresh session; wrap driver errors in StoreUnavailableError."""

        def _call() -> T:
            session = self._session_factory()
            try:
                result = work(session)
                session.commit()
                return result
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(
                    "Account store call failed",
                    extra={"operation": operation, "reason": str(e)[:500]},
                )
                raise StoreUnavailableError(
                    f"Account store unavailable during {operation}.", cause=e
                ) from e
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

        return await run_in_threadpool(_call)

    async def list_all(self) -> list[AccountRecord]:
        def work(session: Session) -> list[AccountRecord]:
            rows = session.query(Account).order_by(Account.created_at, Account.id).all()
            return [AccountRecord.model_validate(row) for row in rows]

        return await self._run("list_all", work)

    async def update_kyc(self, account_id: str, status: KycStatus) -> None:
        def work(session: Session) -> None:
            matched = (
                session.query(Account)
                .filter(Account.id == account_id)
                .update({Account.kyc_status: status}, synchronize_session=False)
            )
            if not matched:
                raise AccountNotFoundError(account_id)

        await self._run("update_kyc", work)

    async def bulk_update_kyc(
        self, account_ids: Iterable[str], status: KycStatus
    ) -> BulkUpdateOutcome:
        requested = set(account_ids)

        def work(session: Session) -> BulkUpdateOutcome:
            existing = {
                row_id
                for (row_id,) in session.query(Account.id)
                .filter(Account.id.in_(requested))
                .with_for_update()
                .all()
            }
            if existing:
                (
                    session.query(Account)
                    .filter(Account.id.in_(existing))
                    .update({Account.kyc_status: status}, synchronize_session=False)
                )
            return BulkUpdateOutcome(updated=existing, failed=requested - existing)

        return await self._run("bulk_update_kyc", work)

    async def update_role(
        self, account_id: str, role: Role, assigned_by: str, assigned_at: datetime
    ) -> None:
        def work(session: Session) -> None:
            matched = (
                session.query(Account)
                .filter(Account.id == account_id)
                .update(
                    {
                        Account.role: role,
                        Account.role_assigned_by: assigned_by,
                        Account.role_assigned_at: assigned_at,
                    },
                    synchronize_session=False,
                )
            )
            if not matched:
                raise AccountNotFoundError(account_id)

        await self._run("update_role", work)

    async def delete_account(self, account_id: str) -> None:
        def work(session: Session) -> None:
            deleted = (
                session.query(Account)
                .filter(Account.id == account_id)
                .delete(synchronize_session=False)
            )
            if not deleted:
                raise AccountNotFoundError(account_id)

        await self._run("delete_account", work)

    async def count_by_role(self, role: Role) -> int:
        def work(session: Session) -> int:
            return (
                session.query(func.count(Account.id))
                .filter(Account.role == role)
                .scalar()
                or 0
            )

        return await self._run("count_by_role", work)
