"""Relationship graph: accounts, follows, blocks

Revision ID: 001
Revises:
Create Date: 2026-10-18

Tables created:
  - accounts  Read-only mirror of the account directory (username, is_active)
  - follows   Follow edges; follower is a local account XOR an external actor URI
  - blocks    Block edges between local accounts, with optional reason
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# ─────────────────────────────────────────────────────────────────────────────
#  UPGRADE
# ─────────────────────────────────────────────────────────────────────────────

def upgrade() -> None:
    # ── 1. accounts ───────────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("username", name="uq_accounts_username"),
    )

    # ── 2. follows ────────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        sa.Column(
            "follow_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("follower_account_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("external_actor_ref", sa.String(2048), nullable=True),
        sa.Column("followed_account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("follow_id", name="pk_follows"),
        sa.ForeignKeyConstraint(
            ["follower_account_id"],
            ["accounts.id"],
            name="fk_follows_follower_account_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["followed_account_id"],
            ["accounts.id"],
            name="fk_follows_followed_account_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "follower_account_id", "followed_account_id", name="uq_follows_local_pair"
        ),
        sa.UniqueConstraint(
            "external_actor_ref", "followed_account_id", name="uq_follows_external_pair"
        ),
        sa.CheckConstraint(
            "(follower_account_id IS NULL) <> (external_actor_ref IS NULL)",
            name="ck_follows_one_identity",
        ),
        sa.CheckConstraint(
            "follower_account_id IS NULL OR follower_account_id <> followed_account_id",
            name="ck_follows_no_self",
        ),
    )
    op.create_index(
        "idx_follows_follower_account_id", "follows", ["follower_account_id", "created_at"]
    )
    op.create_index(
        "idx_follows_followed_account_id", "follows", ["followed_account_id", "created_at"]
    )

    # ── 3. blocks ─────────────────────────────────────────────────────────────
    op.create_table(
        "blocks",
        sa.Column(
            "block_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("blocker_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("blocked_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("block_id", name="pk_blocks"),
        sa.ForeignKeyConstraint(
            ["blocker_id"],
            ["accounts.id"],
            name="fk_blocks_blocker_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["blocked_id"],
            ["accounts.id"],
            name="fk_blocks_blocked_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id <> blocked_id", name="ck_blocks_no_self"),
    )
    op.create_index("ix_blocks_blocker_id", "blocks", ["blocker_id"])
    op.create_index("ix_blocks_blocked_id", "blocks", ["blocked_id"])


# ─────────────────────────────────────────────────────────────────────────────
#  DOWNGRADE
# ─────────────────────────────────────────────────────────────────────────────

def downgrade() -> None:
    op.drop_table("blocks")
    op.drop_table("follows")
    op.drop_table("accounts")
