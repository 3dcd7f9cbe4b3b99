"""
Social graph domain: SQLAlchemy ORM models.

Tables:
  follows   directed follow edges; the follower is either a local account
            (follower_account_id) or a federated actor (external_actor_ref),
            the followed side is always a local account
  blocks    block edges (blocker blocks blocked), local accounts only
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
# accounts must be in the metadata for the foreign keys below
import parasocial.accounts.models  # noqa: F401
from parasocial.social_graph.constants import ACTOR_REF_MAX_LENGTH, BLOCK_REASON_MAX_LENGTH


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Follow(Base):
    __tablename__ = "follows"

    follow_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    follower_account_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=True,
    )
    external_actor_ref: Mapped[str | None] = mapped_column(
        sa.String(ACTOR_REF_MAX_LENGTH), nullable=True
    )
    followed_account_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    # NULLs never collide in a unique constraint, so each identity kind gets its own pair key.
    __table_args__ = (
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
        sa.Index("idx_follows_follower_account_id", "follower_account_id", "created_at"),
        sa.Index("idx_follows_followed_account_id", "followed_account_id", "created_at"),
    )


class Block(Base):
    __tablename__ = "blocks"

    block_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    blocker_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    blocked_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid,
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[str | None] = mapped_column(sa.String(BLOCK_REASON_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id <> blocked_id", name="ck_blocks_no_self"),
    )
