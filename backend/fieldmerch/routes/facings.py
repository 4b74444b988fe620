"""
FieldMerch Backend: Podravka Facings Route Handlers
=====================================================

What:  HTTP surface of the batch facings subsystem.
How:   Each handler resolves the caller (role-guarded), hands the raw JSON
       body to a service, and returns the service's response model.
Who:   Called by the merchandiser mobile app and the admin dashboard.

Route Inventory:
    GET    /podravka-facing                    all facing rows
    GET    /podravka-facing/user-batches       caller's batch summaries
    POST   /podravka-facing/batch              create a batch       (201)
    PUT    /podravka-facing/batch              update batch counts
    DELETE /podravka-facing/batch/{batchId}    delete caller's rows of a batch
    GET    /podravka-facing/batch/{batchId}    batch detail

Bodies are accepted as raw JSON (not Pydantic request models) so the batch
service can apply its ordered per-entry checks and answer with 400/403/404
instead of FastAPI's blanket 422.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.config import settings
from fieldmerch.database import get_db_session
from fieldmerch.dependencies import authorize_role
from fieldmerch.schemas.common import ErrorResponse, MessageResponse
from fieldmerch.schemas.facing import (
    BatchCreateResponse,
    BatchSummary,
    FacingDetailResponse,
    FacingRecordResponse,
)
from fieldmerch.schemas.identity import CallerIdentity
from fieldmerch.services.batch_query_service import batch_query_service
from fieldmerch.services.batch_service import batch_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/podravka-facing", tags=["Podravka Facings"])

# Both admins and employees record facings
facings_access = authorize_role(settings.allowed_roles_list)

_ERRORS = {
    400: {"description": "Invalid batch payload", "model": ErrorResponse},
    401: {"description": "No caller identity", "model": ErrorResponse},
    403: {"description": "Impersonation or store not owned", "model": ErrorResponse},
    404: {"description": "Store or batch not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def _facings_from_body(payload: Any) -> Any:
    """Accepts either a top-level array or {"facings": [...]}."""
    if isinstance(payload, dict) and "facings" in payload:
        return payload["facings"]
    return payload


@router.get(
    "",
    response_model=List[FacingRecordResponse],
    responses={500: _ERRORS[500]},
    summary="List all podravka facings",
)
async def list_facings(
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> List[FacingRecordResponse]:
    return await batch_query_service.list_facings(db)


@router.get(
    "/user-batches",
    response_model=List[BatchSummary],
    responses={code: _ERRORS[code] for code in (401, 500)},
    summary="List the caller's facing batches",
    description=(
        "One summary row per (batch, store, category, report date) for the caller's "
        "batched facings, most recent first."
    ),
)
async def list_user_batches(
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> List[BatchSummary]:
    return await batch_query_service.list_user_batches(db, caller)


@router.post(
    "/batch",
    status_code=201,
    response_model=BatchCreateResponse,
    responses=_ERRORS,
    summary="Submit a batch of facings",
    description=(
        "Validates every entry (own user id, existing store, store ownership unless admin, "
        "all fields present) and inserts them under one new batch id. "
        "A single failing entry rejects the whole batch."
    ),
)
async def create_batch(
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> BatchCreateResponse:
    return await batch_service.create_batch(db, caller, _facings_from_body(payload))


@router.put(
    "/batch",
    response_model=MessageResponse,
    responses={code: _ERRORS[code] for code in (400, 401, 403, 500)},
    summary="Update facing counts in a batch",
)
async def update_batch(
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    body = payload if isinstance(payload, dict) else {}
    return await batch_service.update_batch(
        db, caller, body.get("batchId"), body.get("facings")
    )


@router.delete(
    "/batch/{batch_id}",
    response_model=MessageResponse,
    responses={code: _ERRORS[code] for code in (400, 401, 404, 500)},
    summary="Delete the caller's facings in a batch",
)
async def delete_batch(
    batch_id: str,
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await batch_service.delete_batch(db, caller, batch_id)


@router.get(
    "/batch/{batch_id}",
    response_model=List[FacingDetailResponse],
    responses={code: _ERRORS[code] for code in (400, 404, 500)},
    summary="Get every facing in a batch",
)
async def get_batch_detail(
    batch_id: str,
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> List[FacingDetailResponse]:
    return await batch_query_service.get_batch_detail(db, batch_id)
