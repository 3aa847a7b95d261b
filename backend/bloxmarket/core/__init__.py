"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Status rules are pure functions of their inputs (including "now")

Design Decisions:
    - Functional core separated from imperative shell: repositories read rows,
      ask core for the new field values, then persist them atomically
"""
