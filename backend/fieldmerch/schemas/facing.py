"""
FieldMerch Backend: Facing Request/Response Schemas
=====================================================

What:  Pydantic models defining the facings API contract.
Why:   Automatic serialization and OpenAPI doc generation for responses.
How:   Validated entries are normalized into FacingEntry/UpdateEntry by the
       batch service; responses are built from ORM rows or query mappings.

Field names follow the mobile client's existing payloads: snake_case for
facing fields, camelCase for `batchId` and `affectedRows`.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Normalized Entries (produced by BatchService validation)
# ══════════════════════════════════════════════════════════════════════════


class FacingEntry(BaseModel):
    """One facing in a batch create submission."""
    user_id: int
    store_id: int
    product_id: int
    category: str
    facings_count: int = Field(ge=0)


class CompetitorFacingEntry(BaseModel):
    """One facing in a competitor batch; competitor_product_id is None for brand-level counts."""
    user_id: int
    store_id: int
    competitor_id: int
    competitor_product_id: Optional[int] = None
    category: str
    facings_count: int = Field(ge=0)


class UpdateEntry(BaseModel):
    """One facing in a batch update submission; only the count changes."""
    user_id: int
    product_id: int
    facings_count: int = Field(ge=0)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BatchCreateResponse(BaseModel):
    """
    Returned by POST /podravka-facing/batch with HTTP 201.

    Example:
        {"affectedRows": 3, "batchId": "3f0c...", "message": "..."}
    """
    model_config = ConfigDict(populate_by_name=True)

    affected_rows: int = Field(alias="affectedRows", description="Rows written")
    batch_id: str = Field(alias="batchId", description="Generated batch identifier")
    message: str = Field(default="Podravka facings batch added successfully!")


class FacingRecordResponse(BaseModel):
    """A raw facing row, as returned by GET /podravka-facing."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    store_id: int
    product_id: int
    category: str
    facings_count: int
    batch_id: Optional[str] = None
    report_date: datetime


class BatchSummary(BaseModel):
    """
    One (batch, store, category, date) group of the caller's facings.

    A single submission that spans two stores yields two summaries that
    share the same batch_id.
    """
    batch_id: str
    store_id: int
    store_name: str
    category: str
    report_date: datetime
    product_count: int = Field(description="Number of facing rows in the group")


class FacingDetailResponse(FacingRecordResponse):
    """A facing row joined with submitter, store and product names."""
    user: str = Field(description="Submitter's display name")
    store_name: str
    name: str = Field(description="Product name")


class CombinedFacingResponse(BaseModel):
    """
    A row of the combined listing, from either facings table.

    `source` is "podravka" for own products and "competitor" otherwise.
    `brand` is the competitor's brand name, or None for own rows;
    `product_name` is None for brand-level competitor counts.
    """
    source: str
    id: int
    user_id: int
    store_id: int
    store_name: str
    category: str
    facings_count: int
    batch_id: Optional[str] = None
    report_date: datetime
    brand: Optional[str] = None
    product_name: Optional[str] = None
