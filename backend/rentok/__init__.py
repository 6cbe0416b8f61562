"""
RentOK Admin Backend — Application Package Initializer
=======================================================

What: Marks the `rentok` directory as a Python package.
Who:  Imported by uvicorn (`rentok.main:app`), Alembic, and pytest.

Architecture Note:
    The backend keeps the same layering for every resource:

    ┌─────────────────────────────────────┐
    │   Middleware (Access Gate, logging) │  ← runs before any handler
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    External collaborators (email provider, image CDN) are reached only
    from the services layer.
"""

__version__ = "1.0.0"
