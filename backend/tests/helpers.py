"""
FieldMerch Backend: Test Helpers
==================================

Plain builders and queries shared by the service and route tests.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldmerch.models.competitor import CompetitorFacing
from fieldmerch.models.facing import PodravkaFacing


def make_entry(user_id=1, store_id=1, product_id=3, category="fridge", facings_count=4) -> dict:
    """A valid create entry for user 1 in their own store 1 unless overridden."""
    return {
        "user_id": user_id,
        "store_id": store_id,
        "product_id": product_id,
        "category": category,
        "facings_count": facings_count,
    }


async def count_facings(session: AsyncSession, batch_id: Optional[str] = None) -> int:
    query = select(func.count()).select_from(PodravkaFacing)
    if batch_id is not None:
        query = query.where(PodravkaFacing.batch_id == batch_id)
    result = await session.execute(query)
    return result.scalar_one()


async def fetch_facings(session: AsyncSession, batch_id: str) -> List[PodravkaFacing]:
    result = await session.execute(
        select(PodravkaFacing)
        .where(PodravkaFacing.batch_id == batch_id)
        .order_by(PodravkaFacing.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def auth_headers(user_id: int = 1, role: str = "employee") -> Dict[str, str]:
    """Identity headers as the auth gateway would inject them."""
    return {"X-User-Id": str(user_id), "X-User-Role": role}


def facing_row(user_id: int, store_id: int, product_id: int, batch_id: Optional[str],
               report_date: datetime, category: str = "fridge", facings_count: int = 1) -> PodravkaFacing:
    """A facing row for direct insertion (legacy rows, other users' rows, fixed dates)."""
    return PodravkaFacing(
        user_id=user_id,
        store_id=store_id,
        product_id=product_id,
        category=category,
        facings_count=facings_count,
        batch_id=batch_id,
        report_date=report_date,
    )


def utc(year: int, month: int, day: int, hour: int = 9) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)



def make_competitor_entry(user_id=1, store_id=1, competitor_id=1, competitor_product_id=1,
                          category="shelf", facings_count=2) -> dict:
    """A valid competitor entry: Knorr Spaghetti in user 1's store 1 unless overridden."""
    return {
        "user_id": user_id,
        "store_id": store_id,
        "competitor_id": competitor_id,
        "competitor_product_id": competitor_product_id,
        "category": category,
        "facings_count": facings_count,
    }


async def fetch_competitor_facings(session: AsyncSession, batch_id: str) -> List[CompetitorFacing]:
    result = await session.execute(
        select(CompetitorFacing)
        .where(CompetitorFacing.batch_id == batch_id)
        .order_by(CompetitorFacing.id)
    )
    return list(result.scalars().all())


async def count_competitor_facings(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(CompetitorFacing))
    return result.scalar_one()
