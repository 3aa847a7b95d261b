"""Services — imperative shell: one repository object per entity type.

Invariants:
    - Every public method opens its own session; writes commit exactly once
    - Input is parsed by schemas/ before any IO; status decisions come from core/
    - Methods return pydantic records, never live ORM rows

Design Decisions:
    - Repositories are built once at process start (services/repositories.py)
      and passed by reference, replacing a global per-model registry
"""
