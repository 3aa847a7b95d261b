"""Infrastructure — async database session management and structured logging.

Invariants:
    - Only services/ and the process bootstrap import from here; core/ never does
"""
