"""CSV export of the account directory (one row per account)."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime

from app.schemas.account import AccountRecord

EXPORT_COLUMNS = (
    "User ID",
    "Name",
    "Email",
    "Phone",
    "KYC Status",
    "Role",
    "Created At",
    "Portfolio Count",
)


def _format_date(value: datetime | None) -> str:
    return value.date().isoformat() if value else ""


def account_to_row(account: AccountRecord) -> dict[str, str | int]:
    """Map one account to the export columns."""
    return {
        "User ID": account.id,
        "Name": account.name or "",
        "Email": account.email or "",
        "Phone": account.phone or "",
        "KYC Status": account.kyc_status,
        "Role": account.role,
        "Created At": _format_date(account.created_at),
        "Portfolio Count": account.portfolio_count,
    }


def accounts_to_csv(accounts: Iterable[AccountRecord]) -> str:
    """Render accounts as CSV text. The header row is written even when there are no accounts."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(account_to_row(a) for a in accounts)
    return buffer.getvalue()


def export_filename(now: datetime) -> str:
    return f"accounts_{now.strftime('%Y%m%d_%H%M%S')}.csv"
