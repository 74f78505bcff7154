"""Account administration endpoints: directory view, KYC and role transitions, delete, export."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_transition_engine
from app.api.v1.auth import require_admin, to_actor
from app.schemas.account import AccountRecord, AdminCounts, KycStatus
from app.schemas.auth import CurrentActor
from app.schemas.transitions import (
    BulkKycResponse,
    BulkKycUpdateRequest,
    BusyResponse,
    KycUpdateRequest,
    RoleAssignmentRequest,
    TransitionErrorDetail,
)
from app.schemas.view import AccountProjection, ViewFilter
from app.services.errors import (
    AccountNotFoundError,
    AlreadyInFlightError,
    EmptySelectionError,
    PermissionDeniedError,
    StoreUnavailableError,
    TransitionError,
)
from app.services.export import accounts_to_csv, export_filename
from app.services.transitions import TransitionEngine, bulk_tag

logger = logging.getLogger(__name__)
router = APIRouter()

# Checked in order; first isinstance match decides the status code.
ERROR_STATUS_CODES: tuple[tuple[type[TransitionError], int], ...] = (
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (AlreadyInFlightError, status.HTTP_409_CONFLICT),
    (AccountNotFoundError, status.HTTP_404_NOT_FOUND),
    (EmptySelectionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

Engine = Annotated[TransitionEngine, Depends(get_transition_engine)]
Admin = Annotated[CurrentActor, Depends(require_admin)]


def to_http_error(e: TransitionError) -> HTTPException:
    """Map a transition error to an HTTPException with a structured detail body."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES if isinstance(e, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Account transition failed",
            extra={"code": e.code, "reason": e.message[:500]},
        )
    detail = TransitionErrorDetail(
        code=e.code,
        reason=getattr(e, "reason", None),
        message=e.message,
    )
    return HTTPException(status_code=status_code, detail=detail.model_dump())


@router.get("", response_model=AccountProjection)
async def list_accounts(
    engine: Engine,
    _admin: Admin,
    view_filter: Annotated[ViewFilter, Query(alias="filter")] = "all",
    search: Annotated[str, Query(max_length=255)] = "",
) -> AccountProjection:
    """
    Return the accounts visible under the given filter tab and search text, plus counts for every tab.

    Counts cover the whole directory regardless of filter and search.
    """
    return engine.project(view_filter, search)


@router.post("/refresh", response_model=AccountProjection)
async def refresh_accounts(engine: Engine, _admin: Admin) -> AccountProjection:
    """Reload the directory from the account store."""
    try:
        await engine.refresh()
    except TransitionError as e:
        raise to_http_error(e) from e
    return engine.project()


@router.get("/admin-counts", response_model=AdminCounts)
async def get_admin_counts(engine: Engine, _admin: Admin) -> AdminCounts:
    """Live admin and super admin counts from the account store."""
    try:
        return await engine.admin_counts()
    except TransitionError as e:
        raise to_http_error(e) from e


@router.get("/export")
async def export_accounts(engine: Engine, _admin: Admin) -> Response:
    """Download the directory as CSV."""
    filename = export_filename(datetime.now(UTC))
    return Response(
        content=accounts_to_csv(engine.accounts),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/kyc/bulk/busy", response_model=BusyResponse)
async def get_bulk_busy(
    engine: Engine,
    _admin: Admin,
    kyc_status: Annotated[KycStatus, Query(alias="status")],
) -> BusyResponse:
    """Whether a bulk KYC update to the given status is in flight."""
    action = bulk_tag(kyc_status)
    return BusyResponse(account_id=None, action=action, busy=engine.is_busy(None, action))


@router.post("/kyc/bulk", response_model=BulkKycResponse)
async def post_bulk_kyc(
    body: BulkKycUpdateRequest,
    engine: Engine,
    admin: Admin,
) -> BulkKycResponse:
    """
    Set the KYC status of many accounts in one store call.

    The response lists exactly which ids were updated and which failed; partial is true
    whenever any id failed.
    """
    try:
        result = await engine.bulk_set_kyc_status(to_actor(admin), body.account_ids, body.status)
    except TransitionError as e:
        raise to_http_error(e) from e
    return BulkKycResponse.from_result(result)


@router.post("/{account_id}/kyc", response_model=AccountRecord | None)
async def post_kyc_status(
    account_id: str,
    body: KycUpdateRequest,
    engine: Engine,
    admin: Admin,
) -> AccountRecord | None:
    """Set one account's KYC status. Returns null if the account was deleted mid-flight."""
    try:
        return await engine.set_kyc_status(to_actor(admin), account_id, body.status)
    except TransitionError as e:
        raise to_http_error(e) from e


@router.post("/{account_id}/role", response_model=AccountRecord | None)
async def post_role(
    account_id: str,
    body: RoleAssignmentRequest,
    engine: Engine,
    admin: Admin,
) -> AccountRecord | None:
    """
    Assign a role. Denied for self-targeted changes, for super_admin grants by non-super admins,
    and for demoting the last super admin.
    """
    try:
        return await engine.assign_role(to_actor(admin), account_id, body.role)
    except TransitionError as e:
        raise to_http_error(e) from e


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: str, engine: Engine, admin: Admin) -> Response:
    """Delete an account permanently."""
    try:
        await engine.delete_account(to_actor(admin), account_id)
    except TransitionError as e:
        raise to_http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{account_id}/busy", response_model=BusyResponse)
async def get_busy(
    account_id: str,
    engine: Engine,
    _admin: Admin,
    action: Annotated[str, Query(min_length=1, max_length=64)],
) -> BusyResponse:
    """Whether an action (e.g. kyc:verified, role:admin, delete) is in flight for the account."""
    return BusyResponse(
        account_id=account_id,
        action=action,
        busy=engine.is_busy(account_id, action),
    )
