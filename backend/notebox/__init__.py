"""
Notebox Backend — Application Package Initializer
==================================================

What: Marks the `notebox` directory as a Python package.
Who:  Used by uvicorn (`notebox.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth gate
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← credentials, tokens, notes
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never build SQL; services never touch Request/Response objects.
"""

__version__ = "1.0.0"
