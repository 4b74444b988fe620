"""
FieldMerch Backend: Competitor Facings Route Handlers
=======================================================

Route Inventory:
    POST   /competitor-facing/batch    create a competitor batch   (201)
    GET    /with-competitors           own and competitor rows combined

Same role guard, raw-body handling and error mapping as the own-product
facings routes.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.database import get_db_session
from fieldmerch.routes.facings import _ERRORS, _facings_from_body, facings_access
from fieldmerch.schemas.facing import BatchCreateResponse, CombinedFacingResponse
from fieldmerch.schemas.identity import CallerIdentity
from fieldmerch.services.batch_query_service import batch_query_service
from fieldmerch.services.batch_service import batch_service

router = APIRouter(tags=["Competitor Facings"])


@router.post(
    "/competitor-facing/batch",
    status_code=201,
    response_model=BatchCreateResponse,
    responses=_ERRORS,
    summary="Submit a batch of competitor facings",
    description=(
        "Entries carry competitor_id and an optional competitor_product_id instead of "
        "product_id. Validation and batching are the same as for own products."
    ),
)
async def create_competitor_batch(
    payload: Any = Body(default=None),
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> BatchCreateResponse:
    return await batch_service.create_competitor_batch(db, caller, _facings_from_body(payload))


@router.get(
    "/with-competitors",
    response_model=List[CombinedFacingResponse],
    responses={code: _ERRORS[code] for code in (401, 500)},
    summary="List own and competitor facings together",
)
async def list_facings_with_competitors(
    caller: CallerIdentity = Depends(facings_access),
    db: AsyncSession = Depends(get_db_session),
) -> List[CombinedFacingResponse]:
    return await batch_query_service.list_facings_with_competitors(db)
