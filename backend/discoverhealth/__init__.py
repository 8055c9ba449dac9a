"""
DiscoverHealth Backend — Application Package Initializer
=========================================================

What: Marks the `discoverhealth` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is a layered FastAPI service:

    ┌─────────────────────────────────────┐
    │        Routes (Routing Layer)       │  ← verb + path → service call, auth gate
    ├─────────────────────────────────────┤
    │   Services (Domain Controllers)     │  ← validation, sanitization, error mapping
    ├─────────────────────────────────────┤
    │        DAOs (Data Access)           │  ← parameterized statements per entity
    ├─────────────────────────────────────┤
    │   Database (Persistence Handle)     │  ← async SQLAlchemy engine + sessions
    └─────────────────────────────────────┘

    Every layer receives its collaborators at construction time.
    `create_app()` in main.py builds the graph once per process.
"""

__version__ = "1.0.0"
