"""
Prayer Wall Backend — Application Package Initializer
=====================================================

What: Marks the `prayerwall` directory as a Python package.
Who:  Imported by Alembic, pytest, uvicorn and the bundled client.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, formatting
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The `client` module sits outside these layers: it talks to the API over
    HTTP exactly like the memorial page does.
"""

__version__ = "1.0.0"
