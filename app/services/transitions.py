"""Transition engine: the only writer of the in-memory account set.

Each operation follows the same path: admin entry guard, target lookup, in-flight lock,
permission evaluation (with a fresh super_admin count when needed), one account store call,
then a local merge of exactly the fields that changed.

Locks are keyed by ActionKey(account_id, action_tag) and are never queued: a second request
for a busy key fails immediately with AlreadyInFlightError. The only suspension points are the
store calls and the quorum lock below; lookup, evaluation, and merge run without awaiting,
so no other coroutine can observe a half-applied merge.

Role changes and deletes that could shrink the super_admin set also take one engine-wide
quorum lock around the count query and the store write, so two such removals never read the
same count. That lock queues; it guards the invariant, not duplicate requests.

A delete that lands while another transition on the same account is still waiting on the store
cancels that transition's merge: the account stays deleted and the other call returns None.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import UTC, datetime
from typing import NamedTuple

from app.schemas.account import (
    ADMIN_ROLES,
    SUPER_ADMIN,
    AccountRecord,
    Actor,
    AdminCounts,
    KycStatus,
    Role,
)
from app.schemas.transitions import BulkKycResult
from app.schemas.view import AccountProjection, ViewFilter
from app.services import account_view
from app.services.account_store import AccountStore
from app.services.errors import (
    AccountNotFoundError,
    AlreadyInFlightError,
    EmptySelectionError,
    PermissionDeniedError,
)
from app.services.permissions import (
    Delete,
    SetRole,
    Transition,
    evaluate,
    requires_quorum_check,
)

logger = logging.getLogger(__name__)

DELETE_TAG = "delete"


class ActionKey(NamedTuple):
    """Composite lock key. account_id is None for bulk locks."""

    account_id: str | None
    action_tag: str


def kyc_tag(status: KycStatus) -> str:
    return f"kyc:{status}"


def role_tag(role: Role) -> str:
    return f"role:{role}"


def bulk_tag(status: KycStatus) -> str:
    return f"bulk:{status}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TransitionEngine:
    """
    Owns the in-memory account set and applies KYC, role, and delete transitions to it.

    - store: AccountStore used for every read and write.
    - clock: returns the timestamp written to role_assigned_at (injectable for tests).
    """

    def __init__(
        self,
        store: AccountStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock
        self._accounts: dict[str, AccountRecord] = {}
        self._busy: set[ActionKey] = set()
        self._loaded = False
        self._version = 0
        self._quorum_lock = asyncio.Lock()
        self._projection: tuple[tuple[str, str], AccountProjection] | None = None

    # -- reads -----------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def version(self) -> int:
        """Incremented on every mutation of the account set."""
        return self._version

    @property
    def accounts(self) -> tuple[AccountRecord, ...]:
        return tuple(self._accounts.values())

    def get(self, account_id: str) -> AccountRecord | None:
        return self._accounts.get(account_id)

    def is_busy(self, account_id: str | None, action_tag: str) -> bool:
        return ActionKey(account_id, action_tag) in self._busy

    def busy_keys(self) -> frozenset[ActionKey]:
        return frozenset(self._busy)

    def project(self, view_filter: ViewFilter = "all", search: str = "") -> AccountProjection:
        """
        Filtered/searched projection of the current set.

        Only the most recent (filter, search) pair is cached; any mutation drops it.
        """
        cache_key = (view_filter, search)
        if self._projection is not None and self._projection[0] == cache_key:
            return self._projection[1]
        projection = account_view.project(self.accounts, view_filter, search)
        self._projection = (cache_key, projection)
        return projection

    async def refresh(self) -> None:
        """Replace the in-memory set with the store's current accounts, keeping store order."""
        records = await self._store.list_all()
        self._accounts = {record.id: record for record in records}
        self._loaded = True
        self._changed()
        logger.info("Account set loaded", extra={"account_count": len(records)})

    async def admin_counts(self) -> AdminCounts:
        """Live admin and super admin counts straight from the store."""
        admins = await self._store.count_by_role("admin")
        super_admins = await self._store.count_by_role(SUPER_ADMIN)
        return AdminCounts(admins=admins, super_admins=super_admins)

    # -- internals -------------------------------------------------------------

    def _changed(self) -> None:
        self._version += 1
        self._projection = None

    @contextmanager
    def _hold(self, key: ActionKey) -> Iterator[None]:
        """Mark key busy for the duration of the block; reject if it already is."""
        if key in self._busy:
            raise AlreadyInFlightError(key)
        self._busy.add(key)
        try:
            yield
        finally:
            self._busy.discard(key)

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if actor.role not in ADMIN_ROLES:
            raise PermissionDeniedError(
                "insufficient_privilege",
                "Admin access is required to manage accounts.",
            )

    def _require_account(self, account_id: str) -> AccountRecord:
        record = self._accounts.get(account_id)
        if record is None:
            raise AccountNotFoundError(account_id)
        return record

    @asynccontextmanager
    async def _quorum_guard(
        self, actor: Actor, account_id: str, transition: Transition
    ) -> AsyncIterator[None]:
        """Serialize the block with other super_admin removals; pass through otherwise."""
        target = self._require_account(account_id)
        if not requires_quorum_check(actor.id, target, transition):
            yield
            return
        async with self._quorum_lock:
            yield

    async def _authorize(self, actor: Actor, account_id: str, transition: Transition) -> None:
        """Evaluate transition against the current target, fetching a live count when needed."""
        target = self._require_account(account_id)
        super_admin_count = None
        if requires_quorum_check(actor.id, target, transition):
            super_admin_count = await self._store.count_by_role(SUPER_ADMIN)
            # The set may have changed while the count was in flight.
            target = self._require_account(account_id)
        decision = evaluate(actor.role, actor.id, target, transition, super_admin_count)
        if not decision.allowed:
            logger.warning(
                "Transition denied",
                extra={
                    "actor_id": actor.id,
                    "account_id": account_id,
                    "transition": type(transition).__name__,
                    "reason": decision.reason,
                },
            )
            raise PermissionDeniedError(decision.reason)

    def _merge(self, account_id: str, **fields: object) -> AccountRecord | None:
        """Patch only the named fields. No-op (None) if the account was deleted meanwhile."""
        current = self._accounts.get(account_id)
        if current is None:
            logger.info(
                "Merge skipped; account deleted while transition was in flight",
                extra={"account_id": account_id, "fields": sorted(fields)},
            )
            return None
        patched = current.model_copy(update=fields)
        self._accounts[account_id] = patched
        self._changed()
        return patched

    # -- operations ------------------------------------------------------------

    async def set_kyc_status(
        self, actor: Actor, account_id: str, status: KycStatus
    ) -> AccountRecord | None:
        """
        Set one account's KYC status. Any status may follow any other.

        Returns the patched account, or None if a concurrent delete removed it first.
        """
        self._require_admin(actor)
        self._require_account(account_id)
        with self._hold(ActionKey(account_id, kyc_tag(status))):
            await self._store.update_kyc(account_id, status)
            patched = self._merge(account_id, kyc_status=status)
        logger.info(
            "KYC status updated",
            extra={"actor_id": actor.id, "account_id": account_id, "kyc_status": status},
        )
        return patched

    async def bulk_set_kyc_status(
        self, actor: Actor, account_ids: Iterable[str], status: KycStatus
    ) -> BulkKycResult:
        """
        Set KYC status for many accounts with a single store call.

        Ids missing from the current set are reported as failed without being sent. Only ids
        the store confirms are merged; anything else lands in failed and result.partial is True.
        """
        self._require_admin(actor)
        requested = set(account_ids)
        if not requested:
            raise EmptySelectionError()
        with self._hold(ActionKey(None, bulk_tag(status))):
            known = {aid for aid in requested if aid in self._accounts}
            unknown = requested - known
            updated: set[str] = set()
            failed: set[str] = set(unknown)
            if known:
                outcome = await self._store.bulk_update_kyc(sorted(known), status)
                confirmed = outcome.updated & known
                updated = confirmed
                failed |= known - confirmed
                for aid in confirmed:
                    self._merge(aid, kyc_status=status)
        result = BulkKycResult(status=status, updated=updated, failed=failed)
        log = logger.warning if result.partial else logger.info
        log(
            "Bulk KYC update completed",
            extra={
                "actor_id": actor.id,
                "kyc_status": status,
                "requested_count": len(requested),
                "updated_count": len(updated),
                "failed_count": len(failed),
            },
        )
        return result

    async def assign_role(
        self, actor: Actor, account_id: str, role: Role
    ) -> AccountRecord | None:
        """
        Assign role to an account after permission evaluation.

        role, role_assigned_by and role_assigned_at are written and merged together.
        Returns the patched account, or None if a concurrent delete removed it first.
        """
        self._require_admin(actor)
        self._require_account(account_id)
        transition = SetRole(role)
        with self._hold(ActionKey(account_id, role_tag(role))):
            async with self._quorum_guard(actor, account_id, transition):
                await self._authorize(actor, account_id, transition)
                assigned_at = self._clock()
                await self._store.update_role(account_id, role, actor.id, assigned_at)
            patched = self._merge(
                account_id,
                role=role,
                role_assigned_by=actor.id,
                role_assigned_at=assigned_at,
            )
        logger.info(
            "Role assigned",
            extra={"actor_id": actor.id, "account_id": account_id, "role": role},
        )
        return patched

    async def delete_account(self, actor: Actor, account_id: str) -> None:
        """
        Delete an account. Terminal: the account leaves the set and every lock on it is dropped,
        which cancels the merge step of any transition still waiting on the store.
        """
        self._require_admin(actor)
        self._require_account(account_id)
        transition = Delete()
        with self._hold(ActionKey(account_id, DELETE_TAG)):
            async with self._quorum_guard(actor, account_id, transition):
                await self._authorize(actor, account_id, transition)
                await self._store.delete_account(account_id)
            self._accounts.pop(account_id, None)
            self._busy = {key for key in self._busy if key.account_id != account_id}
            self._changed()
        logger.info(
            "Account deleted",
            extra={"actor_id": actor.id, "account_id": account_id},
        )

