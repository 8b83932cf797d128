"""ORM Models — SQLAlchemy declarative models for the retirement domain.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every row is scoped by user_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from taskwatch.models.repeating_session import RepeatingSession  # noqa: F401
from taskwatch.models.session_history import SessionHistoryEntry  # noqa: F401
from taskwatch.models.repeating_exception import RepeatingException  # noqa: F401
