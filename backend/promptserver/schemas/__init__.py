"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary; invariants live in core/commands.py
    - Response schemas are built from ORM rows or service results via from_* constructors

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
