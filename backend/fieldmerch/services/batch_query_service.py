"""
FieldMerch Backend: Batch Query Service
=========================================

What:  Read side of the facings subsystem: raw listing, the combined
       own-plus-competitor listing, per-user batch summaries, and full
       batch detail with joined reference data.
Who:   Called by the GET facings route handlers.

A batch is not a stored entity. It only exists as the set of rows sharing a
batch_id, so every batch-level view here is computed by a grouping or
filtering query over podravka_facings.

Query plans:
    User batches:
        SELECT pf.batch_id, pf.store_id, s.store_name, pf.category,
               pf.report_date, COUNT(*) AS product_count
        FROM podravka_facings pf JOIN stores s ON pf.store_id = s.store_id
        WHERE pf.user_id = :uid AND pf.batch_id IS NOT NULL
        GROUP BY pf.batch_id, pf.store_id, s.store_name, pf.category, pf.report_date
        ORDER BY pf.report_date DESC
    Batch detail:
        SELECT pf.*, u.username AS user, s.store_name, p.name
        FROM podravka_facings pf
        JOIN users u ... JOIN stores s ... JOIN podravka_products p ...
        WHERE pf.batch_id = :batch_id
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import String, cast, desc, func, literal, null, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from fieldmerch.models.competitor import CompetitorBrand, CompetitorFacing, CompetitorProduct
from fieldmerch.models.facing import PodravkaFacing
from fieldmerch.models.product import PodravkaProduct
from fieldmerch.models.store import Store
from fieldmerch.models.user import User
from fieldmerch.schemas.facing import (
    BatchSummary,
    CombinedFacingResponse,
    FacingDetailResponse,
    FacingRecordResponse,
)
from fieldmerch.schemas.identity import CallerIdentity

logger = logging.getLogger(__name__)


class BatchQueryService:
    """Read-only queries over facing rows and their batches."""

    async def list_facings(self, db: AsyncSession) -> List[FacingRecordResponse]:
        """Every facing row, most recent report first."""
        try:
            result = await db.execute(
                select(PodravkaFacing).order_by(
                    desc(PodravkaFacing.report_date), desc(PodravkaFacing.id)
                )
            )
            return [
                FacingRecordResponse.model_validate(row)
                for row in result.scalars().all()
            ]
        except Exception as e:
            logger.error("Error fetching podravka facings: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve facings. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_facings_with_competitors(self, db: AsyncSession) -> List[CombinedFacingResponse]:
        """
        Own and competitor facing rows in one list, most recent report first.

        Both tables are projected onto the same columns and combined with
        UNION ALL; `source` tells them apart.
        """
        own = (
            select(
                literal("podravka", String).label("source"),
                PodravkaFacing.id.label("id"),
                PodravkaFacing.user_id.label("user_id"),
                PodravkaFacing.store_id.label("store_id"),
                Store.store_name.label("store_name"),
                PodravkaFacing.category.label("category"),
                PodravkaFacing.facings_count.label("facings_count"),
                PodravkaFacing.batch_id.label("batch_id"),
                PodravkaFacing.report_date.label("report_date"),
                cast(null(), String(255)).label("brand"),
                PodravkaProduct.name.label("product_name"),
            )
            .join(Store, PodravkaFacing.store_id == Store.store_id)
            .join(PodravkaProduct, PodravkaFacing.product_id == PodravkaProduct.product_id)
        )
        competitor = (
            select(
                literal("competitor", String).label("source"),
                CompetitorFacing.id.label("id"),
                CompetitorFacing.user_id.label("user_id"),
                CompetitorFacing.store_id.label("store_id"),
                Store.store_name.label("store_name"),
                CompetitorFacing.category.label("category"),
                CompetitorFacing.facings_count.label("facings_count"),
                CompetitorFacing.batch_id.label("batch_id"),
                CompetitorFacing.report_date.label("report_date"),
                CompetitorBrand.brand_name.label("brand"),
                CompetitorProduct.name.label("product_name"),
            )
            .join(Store, CompetitorFacing.store_id == Store.store_id)
            .join(CompetitorBrand, CompetitorFacing.competitor_id == CompetitorBrand.competitor_id)
            .outerjoin(
                CompetitorProduct,
                CompetitorFacing.competitor_product_id == CompetitorProduct.competitor_product_id,
            )
        )
        combined = union_all(own, competitor).subquery()
        query = select(combined).order_by(
            desc(combined.c.report_date), combined.c.source, desc(combined.c.id)
        )

        try:
            result = await db.execute(query)
            return [
                CombinedFacingResponse.model_validate(dict(row))
                for row in result.mappings().all()
            ]
        except Exception as e:
            logger.error("Error fetching facings with competitors: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve facings. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_user_batches(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
    ) -> List[BatchSummary]:
        """
        Summaries of the caller's batches, newest first.

        One summary per (batch_id, store_id, category, report_date) group.
        Rows without a batch_id (recorded before batching) are left out.

        Raises:
            AuthenticationError: No caller identity
            DatabaseError: Query failed
        """
        if caller is None:
            raise AuthenticationError()

        query = (
            select(
                PodravkaFacing.batch_id,
                PodravkaFacing.store_id,
                Store.store_name,
                PodravkaFacing.category,
                PodravkaFacing.report_date,
                func.count().label("product_count"),
            )
            .join(Store, PodravkaFacing.store_id == Store.store_id)
            .where(
                PodravkaFacing.user_id == caller.user_id,
                PodravkaFacing.batch_id.is_not(None),
            )
            .group_by(
                PodravkaFacing.batch_id,
                PodravkaFacing.store_id,
                Store.store_name,
                PodravkaFacing.category,
                PodravkaFacing.report_date,
            )
            .order_by(desc(PodravkaFacing.report_date))
        )

        try:
            result = await db.execute(query)
            return [BatchSummary.model_validate(dict(row)) for row in result.mappings().all()]
        except Exception as e:
            logger.error("Error fetching batches for user %s: %s", caller.user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve your batches. Please try again.",
                context={"user_id": caller.user_id, "error_type": type(e).__name__},
            )

    async def get_batch_detail(
        self,
        db: AsyncSession,
        batch_id: Any,
    ) -> List[FacingDetailResponse]:
        """
        Every row of a batch with submitter, store and product names.

        Visible to any authorized caller, not only the submitter.

        Raises:
            ValidationError: Batch id missing or blank
            NotFoundError: No rows carry this batch id
            DatabaseError: Query failed
        """
        if batch_id is None or not str(batch_id).strip():
            raise ValidationError(message="Batch ID is required.", field="batchId")
        batch_id = str(batch_id).strip()

        query = (
            select(
                PodravkaFacing.id,
                PodravkaFacing.user_id,
                PodravkaFacing.store_id,
                PodravkaFacing.product_id,
                PodravkaFacing.category,
                PodravkaFacing.facings_count,
                PodravkaFacing.batch_id,
                PodravkaFacing.report_date,
                User.username.label("user"),
                Store.store_name,
                PodravkaProduct.name.label("name"),
            )
            .join(User, PodravkaFacing.user_id == User.user_id)
            .join(Store, PodravkaFacing.store_id == Store.store_id)
            .join(PodravkaProduct, PodravkaFacing.product_id == PodravkaProduct.product_id)
            .where(PodravkaFacing.batch_id == batch_id)
            .order_by(PodravkaFacing.id)
        )

        try:
            result = await db.execute(query)
            rows = result.mappings().all()
        except Exception as e:
            logger.error("Error fetching facings for batch %s: %s", batch_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the batch. Please try again.",
                context={"batch_id": batch_id, "error_type": type(e).__name__},
            )

        if not rows:
            raise NotFoundError(resource="facings batch", resource_id=batch_id)

        return [FacingDetailResponse.model_validate(dict(row)) for row in rows]


batch_query_service = BatchQueryService()
