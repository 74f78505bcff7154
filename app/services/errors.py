"""Typed errors raised by the account store and transition engine.

Every error carries a human-readable ``message`` and a stable ``code`` so the API layer
can render a specific response instead of a generic failure string.
"""

from collections.abc import Hashable

from app.schemas.transitions import DENIAL_MESSAGES, DenialReason


class TransitionError(Exception):
    """Base class for all transition failures."""

    code = "transition_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PermissionDeniedError(TransitionError):
    """Raised when the permission evaluator (or the admin entry guard) denies a transition."""

    code = "permission_denied"

    def __init__(self, reason: DenialReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or DENIAL_MESSAGES[reason])


class AlreadyInFlightError(TransitionError):
    """Raised when the same (account, action) pair already has an operation in flight."""

    code = "already_in_flight"

    def __init__(self, key: Hashable) -> None:
        self.key = key
        super().__init__(f"An identical operation is already in progress: {key!r}")


class AccountNotFoundError(TransitionError):
    """Raised when the target account is absent from the current account set or the store."""

    code = "not_found"

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class EmptySelectionError(TransitionError):
    """Raised when a bulk operation is requested with no account ids."""

    code = "empty_selection"

    def __init__(self) -> None:
        super().__init__("Select at least one account for a bulk action.")


class StoreUnavailableError(TransitionError):
    """Raised when the account store cannot complete a call (connection, timeout, driver error)."""

    code = "store_unavailable"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)
