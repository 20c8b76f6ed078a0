"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "generation_sessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("input_text", sa.Text(), nullable=False),
        sa.Column("input_text_hash", sa.String(length=64), nullable=False),
        sa.Column("model_id", sa.String(length=128), nullable=False),
        sa.Column("custom_prompt", sa.Text(), nullable=True),
        sa.Column("generation_duration_ms", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("accepted_unedited_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("accepted_edited_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_generation_sessions_owner_id", "generation_sessions", ["owner_id"], unique=False)
    op.create_index("ix_generation_sessions_input_text_hash", "generation_sessions", ["input_text_hash"], unique=False)
    op.create_index("ix_generation_sessions_created_at", "generation_sessions", ["created_at"], unique=False)

    op.create_table(
        "flashcards",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=True),
        sa.Column("front", sa.String(length=200), nullable=False),
        sa.Column("back", sa.String(length=500), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=16), nullable=False, server_default=sa.text("'manual'")),
        sa.Column("model", sa.String(length=128), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("source IN ('manual', 'ai')", name="ck_flashcards_source"),
        sa.ForeignKeyConstraint(["session_id"], ["generation_sessions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_flashcards_owner_id", "flashcards", ["owner_id"], unique=False)
    op.create_index("ix_flashcards_session_id", "flashcards", ["session_id"], unique=False)
    op.create_index("ix_flashcards_deleted_at", "flashcards", ["deleted_at"], unique=False)
    op.create_index("ix_flashcards_created_at", "flashcards", ["created_at"], unique=False)
    op.create_index(
        "ix_flashcards_pending",
        "flashcards",
        ["owner_id", "session_id"],
        unique=False,
        postgresql_where=sa.text("session_id IS NOT NULL AND deleted_at IS NULL"),
    )

    op.create_table(
        "event_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("session_id", sa.String(length=36), nullable=True),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("event_source", sa.String(length=16), nullable=False, server_default=sa.text("'ai'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("event_source IN ('manual', 'ai')", name="ck_event_logs_event_source"),
        sa.ForeignKeyConstraint(["session_id"], ["generation_sessions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_event_logs_owner_id", "event_logs", ["owner_id"], unique=False)
    op.create_index("ix_event_logs_session_id", "event_logs", ["session_id"], unique=False)
    op.create_index("ix_event_logs_created_at", "event_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_event_logs_created_at", table_name="event_logs")
    op.drop_index("ix_event_logs_session_id", table_name="event_logs")
    op.drop_index("ix_event_logs_owner_id", table_name="event_logs")
    op.drop_table("event_logs")

    op.drop_index("ix_flashcards_pending", table_name="flashcards")
    op.drop_index("ix_flashcards_created_at", table_name="flashcards")
    op.drop_index("ix_flashcards_deleted_at", table_name="flashcards")
    op.drop_index("ix_flashcards_session_id", table_name="flashcards")
    op.drop_index("ix_flashcards_owner_id", table_name="flashcards")
    op.drop_table("flashcards")

    op.drop_index("ix_generation_sessions_created_at", table_name="generation_sessions")
    op.drop_index("ix_generation_sessions_input_text_hash", table_name="generation_sessions")
    op.drop_index("ix_generation_sessions_owner_id", table_name="generation_sessions")
    op.drop_table("generation_sessions")
