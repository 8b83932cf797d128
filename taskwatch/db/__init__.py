"""Database Infrastructure — declarative Base and standalone session factory.

Invariants:
    - Single async engine per process for the app (see infrastructure/database.py)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
