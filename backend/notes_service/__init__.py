"""
Notes Service — Application Package Initializer
===============================================

What: Marks the `notes_service` directory as a Python package.
Who:  Used by uvicorn (`notes_service.main:app`), Alembic, pytest, and the client adapter.

Architecture Note:
    Server side follows a layered layout:

    ┌─────────────────────────────────────┐
    │     Routes + Error Handlers (API)   │  ← HTTP concerns, envelope shape
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, not-found signalling
    ├─────────────────────────────────────┤
    │       Repositories (Note Store)     │  ← insert / find / list / update / delete
    ├─────────────────────────────────────┤
    │   Models, Schemas, Database session │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    The `client` subpackage is the consumer side: an httpx-based adapter with
    retry/backoff and a state container that the UI renders from.
"""

__version__ = "1.0.0"
