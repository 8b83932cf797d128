"""Infrastructure Layer — database session management and logging.

Invariants:
    - Infrastructure never imports from services/
    - All SQLAlchemy failures mapped to DatabaseError

Design Decisions:
    - Singletons initialized by the FastAPI lifespan, never at import time
"""
