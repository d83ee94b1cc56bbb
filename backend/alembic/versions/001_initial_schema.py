"""Initial schema with all tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

This migration creates the complete Learner's Amigo database schema:
- Extensions: citext
- Tables: users, auth_identities, chats, chat_messages, votes, documents,
  suggestions, user_profiles, course_plans
- Indexes: lookup indexes for the per-user and per-chat queries
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, **kwargs) -> sa.Column:
    return sa.Column(
        name,
        postgresql.TIMESTAMP(timezone=True),
        server_default=sa.text("NOW()"),
        nullable=False,
        **kwargs,
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "citext"')

    # ==========================================================================
    # USERS AND AUTH
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", postgresql.CITEXT(), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "auth_identities",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        _timestamp("created_at"),
        _timestamp("last_login_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_auth_identities_user_id", "auth_identities", ["user_id"])
    op.create_index(
        "idx_auth_identities_provider_lookup",
        "auth_identities",
        ["provider", "provider_user_id"],
        unique=True,
    )

    # ==========================================================================
    # CHATS, MESSAGES, VOTES
    # ==========================================================================
    op.create_table(
        "chats",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("visibility", sa.String(16), server_default="private", nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("visibility IN ('private', 'public')", name="valid_visibility"),
    )
    op.create_index("idx_chats_user_created", "chats", ["user_id", "created_at"])

    op.create_table(
        "chat_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("chat_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("content", postgresql.JSONB(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["chat_id"], ["chats.id"], ondelete="CASCADE"),
        sa.CheckConstraint("role IN ('user', 'assistant', 'tool')", name="valid_role"),
    )
    op.create_index("idx_chat_messages_chat_created", "chat_messages", ["chat_id", "created_at"])

    op.create_table(
        "votes",
        sa.Column("chat_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("message_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("is_upvoted", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("chat_id", "message_id"),
        sa.ForeignKeyConstraint(["chat_id"], ["chats.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["message_id"], ["chat_messages.id"], ondelete="CASCADE"),
    )

    # ==========================================================================
    # DOCUMENTS AND SUGGESTIONS
    # ==========================================================================
    op.create_table(
        "documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("kind", sa.String(16), server_default="text", nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint("id", "created_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("kind IN ('text', 'code', 'image')", name="valid_kind"),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "suggestions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("document_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("document_created_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("original_text", sa.Text(), nullable=False),
        sa.Column("suggested_text", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_resolved", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["document_id", "document_created_at"],
            ["documents.id", "documents.created_at"],
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_suggestions_document", "suggestions", ["document_id"])

    # ==========================================================================
    # PROFILES AND COURSE PLANS
    # ==========================================================================
    op.create_table(
        "user_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("education", sa.Text(), nullable=True),
        sa.Column("past_experience", sa.Text(), nullable=True),
        sa.Column("learning_goals", sa.Text(), nullable=True),
        sa.Column("daily_time_commitment", sa.String(64), nullable=True),
        sa.Column("prior_knowledge", sa.String(64), nullable=True),
        sa.Column("current_goal", sa.Text(), nullable=True),
        sa.Column("avatar_fallback", sa.String(10), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "course_plans",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("learning_objectives", postgresql.JSONB(), nullable=True),
        sa.Column("total_estimated_time", sa.String(64), nullable=True),
        sa.Column("modules", postgresql.JSONB(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_course_plans_user_updated", "course_plans", ["user_id", "updated_at"])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table("course_plans")
    op.drop_table("user_profiles")
    op.drop_table("suggestions")
    op.drop_table("documents")
    op.drop_table("votes")
    op.drop_table("chat_messages")
    op.drop_table("chats")
    op.drop_table("auth_identities")
    op.drop_table("users")
