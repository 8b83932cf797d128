"""Initial schema — repeating_sessions, session_history, repeating_exceptions.

Revision ID: 001_initial
Revises: None
Create Date: 2025-11-04

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "repeating_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("frequency", sa.String(10), nullable=False, server_default="daily"),
        sa.Column("day_of_week", sa.Integer, nullable=True),
        sa.Column("time_of_day_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("duration_minutes", sa.Integer, nullable=False, server_default="60"),
        sa.Column("task_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("goal_name", sa.String(200), nullable=True),
        sa.Column("bucket_name", sa.String(200), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "idx_repeating_sessions_end_date", "repeating_sessions", ["end_date"],
    )

    op.create_table(
        "session_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("task_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("goal_name", sa.String(200), nullable=True),
        sa.Column("bucket_name", sa.String(200), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("repeating_session_id", UUID(as_uuid=True), nullable=True),
        sa.Column("original_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # Coverage lookups: confirmations by (owner, rule, scheduled instant)
    op.create_index(
        "idx_session_history_repeat_original", "session_history",
        ["user_id", "repeating_session_id", "original_time"],
    )

    op.create_table(
        "repeating_exceptions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("routine_id", UUID(as_uuid=True), nullable=False),
        sa.Column("occurrence_date", sa.Date, nullable=False),
        sa.Column("action", sa.String(20), nullable=False, server_default="skipped"),
        sa.Column("new_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("new_ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # Coverage lookups: exceptions by (owner, rule, local date)
    op.create_index(
        "idx_repeating_exceptions_lookup", "repeating_exceptions",
        ["user_id", "routine_id", "occurrence_date"],
    )


def downgrade() -> None:
    op.drop_index("idx_repeating_exceptions_lookup", table_name="repeating_exceptions")
    op.drop_table("repeating_exceptions")
    op.drop_index("idx_session_history_repeat_original", table_name="session_history")
    op.drop_table("session_history")
    op.drop_index("idx_repeating_sessions_end_date", table_name="repeating_sessions")
    op.drop_table("repeating_sessions")
