"""
Block graph: block-edge lifecycle and the is-blocked predicates
(zero FastAPI imports).

State rules:
  block:    cannot block self; at most one edge per ordered pair; creating the
            edge removes follow edges between the pair in both directions in
            the same transaction
  follow/block: both take the account-pair lock before checking, so a follow
            and a block between the same accounts never interleave
  unblock:  deletes the edge; never recreates follow edges
"""
from __future__ import annotations

import hashlib
import logging
import uuid

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parasocial.accounts.models import Account
from parasocial.exceptions import AlreadyBlocked, CannotBlockSelf, NotBlocked
from parasocial.social_graph.models import Block, Follow
from shared.database.errors import is_unique_violation
from shared.models.pagination import PageParams

logger = logging.getLogger(__name__)


# ── Pair lock ──────────────────────────────────────────────────────────────────

def pair_lock_key(a: uuid.UUID, b: uuid.UUID) -> int:
    """Signed 64-bit advisory-lock key, identical for (a, b) and (b, a)."""
    low, high = sorted((a, b))
    digest = hashlib.blake2b(low.bytes + high.bytes, digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


async def lock_account_pair(session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> None:
    """Serialize follow and block writes between two accounts until commit or rollback.

    A no-op on dialects without advisory locks (SQLite).
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    await session.execute(sa.select(sa.func.pg_advisory_xact_lock(pair_lock_key(a, b))))


# ── Predicates ─────────────────────────────────────────────────────────────────

async def is_blocked(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> bool:
    """Return True if blocker_id has blocked blocked_id."""
    result = await session.execute(
        sa.select(sa.exists().where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        ))
    )
    return result.scalar_one()


async def is_blocked_either_direction(
    session: AsyncSession, a: uuid.UUID, b: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.select(sa.exists().where(
            sa.or_(
                sa.and_(Block.blocker_id == a, Block.blocked_id == b),
                sa.and_(Block.blocker_id == b, Block.blocked_id == a),
            )
        ))
    )
    return result.scalar_one()


# ── Mutations ──────────────────────────────────────────────────────────────────

async def block_user(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
    *,
    reason: str | None = None,
) -> Block:
    if blocker_id == blocked_id:
        raise CannotBlockSelf()
    await lock_account_pair(session, blocker_id, blocked_id)
    if await is_blocked(session, blocker_id, blocked_id):
        raise AlreadyBlocked()

    edge = Block(blocker_id=blocker_id, blocked_id=blocked_id, reason=reason)
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            logger.info("Concurrent block %s -> %s resolved as duplicate", blocker_id, blocked_id)
            raise AlreadyBlocked() from None
        raise

    # Same transaction as the insert: nobody observes "blocked but still followed".
    removed = await session.execute(
        sa.delete(Follow).where(
            sa.or_(
                sa.and_(
                    Follow.follower_account_id == blocker_id,
                    Follow.followed_account_id == blocked_id,
                ),
                sa.and_(
                    Follow.follower_account_id == blocked_id,
                    Follow.followed_account_id == blocker_id,
                ),
            )
        )
    )
    logger.info(
        "Block %s -> %s created; removed %d follow edge(s)",
        blocker_id,
        blocked_id,
        removed.rowcount,
    )
    return edge


async def unblock_user(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> None:
    result = await session.execute(
        sa.delete(Block).where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        )
    )
    if result.rowcount == 0:
        raise NotBlocked()
    logger.info("Block %s -> %s removed", blocker_id, blocked_id)


# ── Blocked list ───────────────────────────────────────────────────────────────

async def get_blocked(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    params: PageParams,
) -> tuple[list[tuple[Block, Account]], int]:
    total_r = await session.execute(
        sa.select(sa.func.count()).select_from(Block).where(Block.blocker_id == blocker_id)
    )
    total = total_r.scalar_one()
    rows_r = await session.execute(
        sa.select(Block, Account)
        .join(Account, Account.id == Block.blocked_id)
        .where(Block.blocker_id == blocker_id)
        .order_by(Block.created_at.desc(), Block.block_id.asc())
        .limit(params.limit)
        .offset(params.offset)
    )
    return [(b, a) for b, a in rows_r.all()], total
