"""API Layer — process-level HTTP surface: domain error handlers and health probes.

Invariants:
    - Entity endpoints belong to the controller layer that consumes
      app.state.repositories; this package only maps errors and reports health
"""
