"""
Blog Backend - Application Package Initializer
===============================================

What: Marks the `blog` directory as a Python package.
Who:  Imported by uvicorn (`blog.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Orchestration)      │  ← NotFound checks, DTO mapping
    ├─────────────────────────────────────┤
    │          Stores (Data Access)       │  ← SQL over an AsyncSession
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
