"""Permission evaluation for account transitions: pure decisions over actor, target, and transition.

Rules run in a fixed order and the first denial wins:

1. self modification: an actor may not change their own role or delete their own account.
2. insufficient privilege: only a super_admin may grant super_admin.
3. last super admin: demoting or deleting a super_admin must leave at least one behind.

The last rule needs a live super_admin count. Callers fetch it from the account store right
before evaluating (see requires_quorum_check) and pass it in; this module never does I/O and
never raises for a denial.
"""

from dataclasses import dataclass

from app.schemas.account import AccountRecord, KycStatus, Role, SUPER_ADMIN
from app.schemas.transitions import DENIAL_MESSAGES, DenialReason

# Super admins that must remain once one has existed.
MIN_SUPER_ADMINS = 1


@dataclass(frozen=True)
class SetKyc:
    status: KycStatus


@dataclass(frozen=True)
class SetRole:
    role: Role


@dataclass(frozen=True)
class Delete:
    pass


Transition = SetKyc | SetRole | Delete


@dataclass(frozen=True)
class Decision:
    """Allow, or deny with a structured reason."""

    allowed: bool
    reason: DenialReason | None = None

    @property
    def message(self) -> str | None:
        return DENIAL_MESSAGES.get(self.reason) if self.reason else None


ALLOW = Decision(allowed=True)


def deny(reason: DenialReason) -> Decision:
    return Decision(allowed=False, reason=reason)


def _removes_super_admin(target: AccountRecord, transition: Transition) -> bool:
    """True when the transition would take target out of the super_admin set."""
    if target.role != SUPER_ADMIN:
        return False
    if isinstance(transition, Delete):
        return True
    return isinstance(transition, SetRole) and transition.role != SUPER_ADMIN


def requires_quorum_check(
    actor_id: str, target: AccountRecord, transition: Transition
) -> bool:
    """
    Whether evaluate() will need a live super_admin count for this request.

    False when an earlier rule already decides the outcome, so callers skip the count query.
    """
    if isinstance(transition, SetKyc):
        return False
    if target.id == actor_id:
        return False
    return _removes_super_admin(target, transition)


def evaluate(
    actor_role: Role,
    actor_id: str,
    target: AccountRecord,
    transition: Transition,
    super_admin_count: int | None = None,
) -> Decision:
    """
    Decide whether actor may apply transition to target.

    - super_admin_count: live count of super_admins, required when requires_quorum_check() is True.
      A missing count is treated as zero, so the last-super-admin rule fails closed.
    """
    if isinstance(transition, SetKyc):
        return ALLOW

    if target.id == actor_id:
        return deny("self_modification")

    if (
        isinstance(transition, SetRole)
        and transition.role == SUPER_ADMIN
        and actor_role != SUPER_ADMIN
    ):
        return deny("insufficient_privilege")

    if _removes_super_admin(target, transition):
        remaining = (super_admin_count or 0) - 1
        if remaining < MIN_SUPER_ADMINS:
            return deny("last_super_admin")

    return ALLOW
