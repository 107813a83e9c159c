"""initial schema - users, api_tokens, scrobs

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00.000000

Hey future me - this is the WHOLE schema in one go:
- users: unique case-sensitive username, bcrypt hash, admin flag
- api_tokens: SHA-256 digest of each bearer token (never the token itself),
  one-way revoked flag, cascade-deleted with the user
- scrobs: play events, indexed on (user_id, timestamp) for the recency
  listing and the rankings

All timestamps are INTEGER epoch seconds.

To run this migration:
    alembic upgrade head
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

# SQLite only autoincrements "INTEGER PRIMARY KEY"
BigIntId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """Create users, api_tokens and scrobs."""
    op.create_table(
        "users",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "api_tokens",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("label", sa.String(255), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("last_used_at", sa.BigInteger(), nullable=True),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_api_tokens_user_id", "api_tokens", ["user_id"])

    op.create_table(
        "scrobs",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("artist", sa.Text(), nullable=False),
        sa.Column("track", sa.Text(), nullable=False),
        sa.Column("album", sa.Text(), nullable=True),
        sa.Column("duration", sa.BigInteger(), nullable=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_scrobs_user_timestamp", "scrobs", ["user_id", "timestamp"])


def downgrade() -> None:
    """Drop everything created in upgrade()."""
    op.drop_index("ix_scrobs_user_timestamp", table_name="scrobs")
    op.drop_table("scrobs")
    op.drop_index("ix_api_tokens_user_id", table_name="api_tokens")
    op.drop_table("api_tokens")
    op.drop_table("users")
