"""Pydantic Schemas — input validation and output records for repository boundaries.

Invariants:
    - Every create/update runs its input model through parse_input() first
    - Output records never expose password_hash
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are contracts, models are persistence
    - Records built with from_attributes so ORM rows convert without hand mapping
"""
