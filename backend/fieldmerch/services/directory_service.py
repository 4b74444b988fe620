"""
FieldMerch Backend: Directory Service
=======================================

What:  Read-only lookups of reference data (stores, own products,
       competitor brands and products).
Why:   Batch validation needs to know whether a store exists and who owns
       it, and whether a competitor brand or product exists.
How:   One query per call. Nothing is cached, so every entry in a batch is
       validated against the state of the database at that moment.
Who:   Called by BatchService during validation.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.models.competitor import CompetitorBrand, CompetitorProduct
from fieldmerch.models.product import PodravkaProduct
from fieldmerch.models.store import Store

logger = logging.getLogger(__name__)


def as_id(value: Any) -> Optional[int]:
    """Coerces a client-supplied id (int or digit string) to a positive int, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        ident = value
    elif isinstance(value, str) and value.strip().isdigit():
        ident = int(value.strip())
    else:
        return None
    return ident if ident > 0 else None


class DirectoryService:
    """Lookups against the store, own-product and competitor tables."""

    async def find_store_by_id(
        self,
        db: AsyncSession,
        store_id: Any,
        lock: bool = False,
    ) -> Optional[Store]:
        """
        Fetch a store by primary key.

        Args:
            db: Async database session
            store_id: Raw id from the request payload (may be missing or malformed)
            lock: Take a shared row lock (SELECT ... FOR SHARE) so the store's
                  owner cannot change before the enclosing transaction commits.
                  Backends without row locks (SQLite) ignore it.

        Returns:
            The Store, or None if the id is malformed or matches nothing.
        """
        ident = as_id(store_id)
        if ident is None:
            return None

        query = select(Store).where(Store.store_id == ident)
        if lock:
            query = query.with_for_update(read=True)

        result = await db.execute(query)
        store = result.scalar_one_or_none()
        logger.debug("Store lookup %s → %s", ident, "found" if store else "missing")
        return store

    async def find_product_by_id(
        self,
        db: AsyncSession,
        product_id: Any,
    ) -> Optional[PodravkaProduct]:
        """Fetch an own-brand product by primary key, or None."""
        ident = as_id(product_id)
        if ident is None:
            return None

        result = await db.execute(
            select(PodravkaProduct).where(PodravkaProduct.product_id == ident)
        )
        return result.scalar_one_or_none()

    async def find_competitor_by_id(
        self,
        db: AsyncSession,
        competitor_id: Any,
    ) -> Optional[CompetitorBrand]:
        """Fetch a competitor brand by primary key, or None."""
        ident = as_id(competitor_id)
        if ident is None:
            return None

        result = await db.execute(
            select(CompetitorBrand).where(CompetitorBrand.competitor_id == ident)
        )
        return result.scalar_one_or_none()

    async def find_competitor_product_by_id(
        self,
        db: AsyncSession,
        competitor_product_id: Any,
    ) -> Optional[CompetitorProduct]:
        ident = as_id(competitor_product_id)
        if ident is None:
            return None

        result = await db.execute(
            select(CompetitorProduct).where(CompetitorProduct.competitor_product_id == ident)
        )
        return result.scalar_one_or_none()


directory_service = DirectoryService()
