"""
FieldMerch Backend: Application Package Initializer
====================================================

What: Marks the `fieldmerch` directory as a Python package.
Why:  Enables module imports like `from fieldmerch.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend records shelf facings collected by field merchandisers.
    It follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, caller identity
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Batch validation, grouping queries
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch SQL directly; services never see a Request object.
"""

__version__ = "1.0.0"
