"""
Notely Backend — Application Package Initializer
=================================================

What: Marks the `notely` directory as a Python package.
Who:  Used by uvicorn, Alembic, pytest and the `notely` console script.

Architecture Note:
    The backend follows the same layered structure top to bottom:

    ┌─────────────────────────────────────┐
    │        Routes + Router (HTTP)       │  ← status codes, auth wiring
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, ownership
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database + Bootstrap (Persistence)│  ← optional, decided at startup
    └─────────────────────────────────────┘

    When no DATABASE_URL is configured the bottom layer is absent and only
    the health check is mounted (degraded mode).
"""

__version__ = "1.0.0"
