# Services package init
"""
FieldMerch Backend: Services Layer
====================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - DirectoryService: Store and product lookups used during validation
    - BatchService: Validated create/update/delete of facing batches
      (competitor batches: create only)
    - BatchQueryService: Facing listings, batch summaries and batch detail

Services take the AsyncSession and caller identity as arguments on every
call and hold no per-request state, so tests can pass an in-memory SQLite
session or a mock in place of the production database.
"""
