"""Account view model: filter tab, free-text search, and tab counts over the account set.

project() is a pure function of (accounts, filter, search). Counts always cover the full set,
so switching tabs or typing a search never changes the other tabs' numbers. Visible accounts
keep the order of the input sequence.
"""

from collections.abc import Callable, Sequence

from app.schemas.account import ADMIN_ROLES, AccountRecord
from app.schemas.view import AccountCounts, AccountProjection, ViewFilter

FILTER_PREDICATES: dict[str, Callable[[AccountRecord], bool]] = {
    "all": lambda account: True,
    "pending": lambda account: account.kyc_status == "pending",
    "verified": lambda account: account.kyc_status == "verified",
    "rejected": lambda account: account.kyc_status == "rejected",
    "admins": lambda account: account.role in ADMIN_ROLES,
}


def matches_search(account: AccountRecord, search: str) -> bool:
    """
    Substring match on name or email (case-insensitive) or phone (as typed).

    Blank search (after trimming) matches everything.
    """
    needle = search.strip()
    if not needle:
        return True
    folded = needle.casefold()
    return (
        folded in (account.name or "").casefold()
        or folded in (account.email or "").casefold()
        or needle in (account.phone or "")
    )


def count_accounts(accounts: Sequence[AccountRecord]) -> AccountCounts:
    """Count every tab over the full account set."""
    totals = {name: 0 for name in FILTER_PREDICATES}
    for account in accounts:
        for name, predicate in FILTER_PREDICATES.items():
            if predicate(account):
                totals[name] += 1
    return AccountCounts(**totals)


def project(
    accounts: Sequence[AccountRecord],
    view_filter: ViewFilter = "all",
    search: str = "",
) -> AccountProjection:
    """Apply filter then search; return visible accounts in input order plus full-set counts."""
    predicate = FILTER_PREDICATES[view_filter]
    visible = [
        account
        for account in accounts
        if predicate(account) and matches_search(account, search)
    ]
    return AccountProjection(
        filter=view_filter,
        search=search,
        visible=visible,
        counts=count_accounts(accounts),
    )
