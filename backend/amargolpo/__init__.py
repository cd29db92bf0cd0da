"""
AmarGolpo Backend — Application Package Initializer
====================================================

What: Marks the `amargolpo` directory as a Python package.
Who:  Used by uvicorn (`amargolpo.main:app`), pytest, and `python -m amargolpo`.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (ratings, likes, CRUD)   │  ← Business rules
    ├─────────────────────────────────────┤
    │     Models & Schemas (pydantic)     │  ← Stored documents + API contracts
    ├─────────────────────────────────────┤
    │     DocumentStore (MongoDB)         │  ← One client per process
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
