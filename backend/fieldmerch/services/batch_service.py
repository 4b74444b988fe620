"""
FieldMerch Backend: Batch Service (Facings Orchestrator)
==========================================================

What:  Validates, authorizes and writes multi-row facing submissions that
       share one batch identifier: create, update and delete.
Who:   Called by the facings route handlers with an explicit caller identity.
When:  Every time a merchandiser submits, corrects or discards a store visit.

Create Flow (POST /podravka-facing/batch, POST /competitor-facing/batch):
    ┌──────────┐    ┌──────────────────────┐    ┌───────────────┐
    │  Caller  │───▶│ Validate every entry │───▶│ One bulk      │
    │  + rows  │    │ (identity, store,    │    │ INSERT with a │
    └──────────┘    │  ownership, fields)  │    │ new batch_id  │
                    └──────────────────────┘    └───────────────┘

    The first failing entry aborts the whole submission before anything
    is written. Store lookups take a shared row lock inside the request
    transaction, so ownership cannot change between validation and insert.

Error Handling:
    Application errors (401/403/400/404) propagate unchanged. Anything else
    is logged with its stack trace and re-raised as DatabaseError (500),
    which rolls back the request transaction in get_db_session.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import bindparam, delete, insert, update
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.exceptions import (
    AuthenticationError,
    DatabaseError,
    FieldMerchError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from fieldmerch.models.competitor import CompetitorFacing
from fieldmerch.models.facing import PodravkaFacing
from fieldmerch.models.store import Store
from fieldmerch.schemas.common import MessageResponse
from fieldmerch.schemas.facing import (
    BatchCreateResponse,
    CompetitorFacingEntry,
    FacingEntry,
    UpdateEntry,
)
from fieldmerch.schemas.identity import CallerIdentity
from fieldmerch.services.directory_service import as_id, directory_service

logger = logging.getLogger(__name__)

# Both facings tables share this column width
CATEGORY_MAX_LENGTH = PodravkaFacing.__table__.c.category.type.length


# ── Field Helpers ─────────────────────────────────────────────────────────

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_count(value: Any) -> Optional[int]:
    """Coerces a facings count to a non-negative int, or None if malformed."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        count = value
    elif isinstance(value, float) and value.is_integer():
        count = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        count = int(value.strip())
    else:
        return None
    return count if count >= 0 else None


def _require_caller(caller: Optional[CallerIdentity]) -> CallerIdentity:
    if caller is None:
        raise AuthenticationError()
    return caller


def _require_entries(entries: Any, message: str) -> List[Any]:
    if not isinstance(entries, (list, tuple)) or len(entries) == 0:
        raise ValidationError(message=message, field="facings")
    return list(entries)


def _require_mapping(raw: Any, index: int) -> Mapping:
    if not isinstance(raw, Mapping):
        raise ValidationError(
            message="Each facing must be an object",
            context={"index": index},
        )
    return raw


def _require_fields(entry: Mapping, fields: Tuple[str, ...], index: int) -> None:
    for field in fields:
        if _is_blank(entry.get(field)):
            raise ValidationError(
                message="Each facing must have all fields filled!",
                field=field,
                context={"index": index},
            )


def _check_category(entry: Mapping, index: int) -> str:
    category = str(entry["category"]).strip()
    if len(category) > CATEGORY_MAX_LENGTH:
        raise ValidationError(
            message=f"category must be at most {CATEGORY_MAX_LENGTH} characters",
            field="category",
            context={"index": index},
        )
    return category


def _check_count(entry: Mapping, index: int) -> int:
    count = _as_count(entry.get("facings_count"))
    if count is None:
        raise ValidationError(
            message="facings_count must be a non-negative integer",
            field="facings_count",
            context={"index": index},
        )
    return count


class BatchService:
    """
    Business logic for batch facing writes.

    Stateless: the session and caller are passed into every call.
    """

    # ── Create ────────────────────────────────────────────────────────────

    async def _authorize_entry(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        raw: Any,
        index: int,
    ) -> Tuple[Mapping, Store]:
        """
        The checks shared by own and competitor entries, in order:
        object shape, declared user, store existence, store ownership.
        """
        entry = _require_mapping(raw, index)

        if entry.get("user_id") != caller.user_id:
            raise PermissionDeniedError(
                message="You are not authorized to submit facings for another user.",
                context={"index": index},
            )

        store = await directory_service.find_store_by_id(db, entry.get("store_id"), lock=True)
        if store is None:
            raise NotFoundError(resource="store", resource_id=str(entry.get("store_id")))

        if store.user_id != caller.user_id and not caller.is_admin:
            raise PermissionDeniedError(
                message="You are not allowed to submit facings for this store",
                context={"index": index, "store_id": store.store_id},
            )

        return entry, store

    async def _validate_create_entry(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        raw: Any,
        index: int,
    ) -> FacingEntry:
        """Checks one own-product entry. Raises on the first failure."""
        entry, store = await self._authorize_entry(db, caller, raw, index)
        _require_fields(entry, ("product_id", "category", "facings_count"), index)

        product_id = as_id(entry.get("product_id"))
        if product_id is None:
            raise ValidationError(
                message="product_id must be a positive integer",
                field="product_id",
                context={"index": index},
            )

        return FacingEntry(
            user_id=caller.user_id,
            store_id=store.store_id,
            product_id=product_id,
            category=_check_category(entry, index),
            facings_count=_check_count(entry, index),
        )

    async def _validate_competitor_entry(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        raw: Any,
        index: int,
    ) -> CompetitorFacingEntry:
        """
        Checks one competitor entry: the shared checks, then required fields,
        the brand, and (when given) a product belonging to that brand.
        """
        entry, store = await self._authorize_entry(db, caller, raw, index)
        _require_fields(entry, ("competitor_id", "category", "facings_count"), index)

        brand = await directory_service.find_competitor_by_id(db, entry.get("competitor_id"))
        if brand is None:
            raise NotFoundError(
                resource="competitor brand", resource_id=str(entry.get("competitor_id"))
            )

        product_id = None
        if not _is_blank(entry.get("competitor_product_id")):
            product = await directory_service.find_competitor_product_by_id(
                db, entry.get("competitor_product_id")
            )
            if product is None:
                raise NotFoundError(
                    resource="competitor product",
                    resource_id=str(entry.get("competitor_product_id")),
                )
            if product.competitor_id != brand.competitor_id:
                raise ValidationError(
                    message="competitor_product_id does not belong to competitor_id",
                    field="competitor_product_id",
                    context={"index": index},
                )
            product_id = product.competitor_product_id

        return CompetitorFacingEntry(
            user_id=caller.user_id,
            store_id=store.store_id,
            competitor_id=brand.competitor_id,
            competitor_product_id=product_id,
            category=_check_category(entry, index),
            facings_count=_check_count(entry, index),
        )

    async def _create(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        entries: Any,
        validate: Callable[..., Awaitable[BaseModel]],
        model: type,
        message: str,
    ) -> BatchCreateResponse:
        caller = _require_caller(caller)
        entries = _require_entries(entries, "Facings array is required!")

        try:
            validated = [
                await validate(db, caller, raw, index)
                for index, raw in enumerate(entries)
            ]

            batch_id = str(uuid.uuid4())
            # One timestamp for the whole batch so it groups as one report
            report_date = datetime.now(timezone.utc)
            rows = [
                {**entry.model_dump(), "batch_id": batch_id, "report_date": report_date}
                for entry in validated
            ]

            await db.execute(insert(model), rows)
            await db.flush()
            logger.info(
                "User %s created %s batch %s with %d rows",
                caller.user_id, model.__tablename__, batch_id, len(rows),
            )

            return BatchCreateResponse(affected_rows=len(rows), batch_id=batch_id, message=message)

        except FieldMerchError:
            raise
        except Exception as e:
            logger.error("Error batch adding %s: %s", model.__tablename__, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the facings batch. Please try again.",
                context={"user_id": caller.user_id, "error_type": type(e).__name__},
            )

    async def create_batch(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        entries: Any,
    ) -> BatchCreateResponse:
        """
        Validate every entry, then insert them all under one new batch id.

        Args:
            db: Async database session (one transaction per request)
            caller: Authenticated caller, or None
            entries: Raw JSON array of {user_id, store_id, product_id,
                     category, facings_count}

        Returns:
            BatchCreateResponse with the row count and generated batch id

        Raises:
            AuthenticationError: No caller identity
            ValidationError: Empty/non-array body, or an entry missing a field
            PermissionDeniedError: Entry for another user, or a store the
                                   caller does not own (non-admins only)
            NotFoundError: Entry references an unknown store
            DatabaseError: The insert failed
        """
        return await self._create(
            db, caller, entries,
            self._validate_create_entry,
            PodravkaFacing,
            "Podravka facings batch added successfully!",
        )

    async def create_competitor_batch(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        entries: Any,
    ) -> BatchCreateResponse:
        """
        Same contract as create_batch, for competitor facings.

        Entries carry competitor_id (and optionally competitor_product_id)
        instead of product_id. An unknown brand or product is NotFound; a
        product of a different brand is a ValidationError.
        """
        return await self._create(
            db, caller, entries,
            self._validate_competitor_entry,
            CompetitorFacing,
            "Competitor facings batch added successfully!",
        )

    # ── Update ────────────────────────────────────────────────────────────

    def _validate_update_entry(
        self,
        caller: CallerIdentity,
        raw: Any,
        index: int,
    ) -> UpdateEntry:
        entry = _require_mapping(raw, index)

        if entry.get("user_id") != caller.user_id:
            raise PermissionDeniedError(
                message="You are not authorized to update facings for another user.",
                context={"index": index},
            )

        if _is_blank(entry.get("product_id")) or entry.get("facings_count") is None:
            raise ValidationError(
                message="Each facing must have product_id and facings_count!",
                context={"index": index},
            )

        product_id = as_id(entry.get("product_id"))
        count = _as_count(entry.get("facings_count"))
        if product_id is None or count is None:
            raise ValidationError(
                message="product_id must be a positive integer and facings_count non-negative",
                context={"index": index},
            )

        return UpdateEntry(user_id=caller.user_id, product_id=product_id, facings_count=count)

    async def update_batch(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        batch_id: Any,
        entries: Any,
    ) -> MessageResponse:
        """
        Overwrite facings_count for the caller's rows in a batch.

        Each entry updates the rows matching (batch_id, product_id, caller);
        entries that match nothing are ignored. Nothing but facings_count
        is ever written.

        All per-entry statements go to the database together as one
        executemany call; there is no ordering between them, and if any
        fails the request transaction rolls back every one.

        Raises:
            AuthenticationError: No caller identity
            ValidationError: Missing batch id, empty array, or bad entry
            PermissionDeniedError: Entry for another user
            DatabaseError: An update failed
        """
        caller = _require_caller(caller)
        if _is_blank(batch_id):
            raise ValidationError(message="batchId and facings array are required!", field="batchId")
        entries = _require_entries(entries, "batchId and facings array are required!")

        validated = [
            self._validate_update_entry(caller, raw, index)
            for index, raw in enumerate(entries)
        ]

        table = PodravkaFacing.__table__
        statement = (
            update(table)
            .where(
                table.c.batch_id == bindparam("b_batch_id"),
                table.c.product_id == bindparam("b_product_id"),
                table.c.user_id == bindparam("b_user_id"),
            )
            .values(facings_count=bindparam("b_facings_count"))
        )
        params = [
            {
                "b_batch_id": str(batch_id),
                "b_product_id": entry.product_id,
                "b_user_id": caller.user_id,
                "b_facings_count": entry.facings_count,
            }
            for entry in validated
        ]

        try:
            await db.execute(statement, params)
            await db.flush()
        except Exception as e:
            logger.error("Error updating facings batch %s: %s", batch_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the facings batch. Please try again.",
                context={"batch_id": str(batch_id), "error_type": type(e).__name__},
            )

        logger.info(
            "User %s updated %d facings in batch %s",
            caller.user_id, len(params), batch_id,
        )
        return MessageResponse(message="Facings updated successfully!")

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_batch(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        batch_id: Any,
    ) -> MessageResponse:
        """
        Delete the caller's own rows of a batch.

        Scoped to (batch_id, caller.user_id) for every role, admins included:
        rows another user submitted under the same batch id are never touched.

        Raises:
            AuthenticationError: No caller identity
            ValidationError: Missing batch id
            NotFoundError: The caller has no rows in this batch
            DatabaseError: The delete failed
        """
        caller = _require_caller(caller)
        if _is_blank(batch_id):
            raise ValidationError(message="Batch ID is required.", field="batchId")

        try:
            result = await db.execute(
                delete(PodravkaFacing).where(
                    PodravkaFacing.batch_id == str(batch_id),
                    PodravkaFacing.user_id == caller.user_id,
                )
            )
            deleted = result.rowcount
        except Exception as e:
            logger.error("Error deleting facings batch %s: %s", batch_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the facings batch. Please try again.",
                context={"batch_id": str(batch_id), "error_type": type(e).__name__},
            )

        if not deleted:
            raise NotFoundError(resource="facings batch", resource_id=str(batch_id))

        logger.info("User %s deleted %d facings from batch %s", caller.user_id, deleted, batch_id)
        return MessageResponse(message="Facings batch deleted successfully!")


# ── Singleton Instance ────────────────────────────────────────────────────
batch_service = BatchService()
