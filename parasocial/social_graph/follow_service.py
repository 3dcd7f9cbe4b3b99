"""
Follow graph: follow-edge lifecycle and graph queries (zero FastAPI imports).

State rules, checked in this order on follow:
  1. the followed account exists and is active
  2. a local follower cannot follow itself
  3. a local follower cannot follow across a block (either direction); the
     check runs under the account-pair lock that block_user also takes
  4. at most one edge per (follower identity, followed) pair

Rule 4 is also a unique constraint; a violation on insert is the authoritative
signal that a concurrent request won the race and is reported as
AlreadyFollowing, never retried.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parasocial.accounts.models import Account
from parasocial.accounts.service import get_account
from parasocial.exceptions import (
    AccountInactive,
    AccountNotFound,
    AlreadyFollowing,
    CannotFollowSelf,
    FollowForbiddenByBlock,
    NotFollowing,
    TooManyTargets,
)
from parasocial.social_graph import block_service
from parasocial.social_graph.identity import ExternalFollower, FollowerIdentity, LocalFollower
from parasocial.social_graph.models import Follow
from parasocial.social_graph.schemas import FollowStats, RelationshipSummary
from shared.database.errors import is_unique_violation
from shared.models.pagination import PageParams

logger = logging.getLogger(__name__)

DEFAULT_BULK_CHECK_MAX_TARGETS = 500


# ── Internal helpers ───────────────────────────────────────────────────────────

def _follower_clause(identity: FollowerIdentity) -> sa.ColumnElement[bool]:
    if isinstance(identity, LocalFollower):
        return Follow.follower_account_id == identity.account_id
    return Follow.external_actor_ref == identity.actor_ref


async def _follow_exists(
    session: AsyncSession, identity: FollowerIdentity, followed_id: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.select(sa.exists().where(
            _follower_clause(identity),
            Follow.followed_account_id == followed_id,
        ))
    )
    return result.scalar_one()


async def _count(session: AsyncSession, *where: sa.ColumnElement[bool]) -> int:
    result = await session.execute(sa.select(sa.func.count()).select_from(Follow).where(*where))
    return result.scalar_one()


# ── Follow / unfollow ──────────────────────────────────────────────────────────

async def follow_user(
    session: AsyncSession,
    identity: FollowerIdentity,
    followed_account_id: uuid.UUID,
) -> Follow:
    followed = await get_account(session, followed_account_id)
    if followed is None:
        raise AccountNotFound()
    if not followed.is_active:
        raise AccountInactive()

    if isinstance(identity, LocalFollower):
        if identity.account_id == followed_account_id:
            raise CannotFollowSelf()
        await block_service.lock_account_pair(session, identity.account_id, followed_account_id)
        if await block_service.is_blocked_either_direction(
            session, identity.account_id, followed_account_id
        ):
            raise FollowForbiddenByBlock()

    if await _follow_exists(session, identity, followed_account_id):
        raise AlreadyFollowing()

    edge = Follow(
        follower_account_id=identity.account_id if isinstance(identity, LocalFollower) else None,
        external_actor_ref=identity.actor_ref if isinstance(identity, ExternalFollower) else None,
        followed_account_id=followed_account_id,
    )
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            logger.info(
                "Concurrent follow of %s by %s resolved as duplicate",
                followed_account_id,
                identity.kind.value,
            )
            raise AlreadyFollowing() from None
        raise
    logger.info(
        "Follow %s created (%s follower -> %s)",
        edge.follow_id,
        identity.kind.value,
        followed_account_id,
    )
    return edge


async def unfollow_user(
    session: AsyncSession,
    follower_account_id: uuid.UUID,
    followed_account_id: uuid.UUID,
) -> None:
    # Single DELETE: of two concurrent unfollows exactly one sees a row.
    result = await session.execute(
        sa.delete(Follow).where(
            Follow.follower_account_id == follower_account_id,
            Follow.followed_account_id == followed_account_id,
        )
    )
    if result.rowcount == 0:
        raise NotFollowing()
    logger.info("Follow %s -> %s removed", follower_account_id, followed_account_id)


# ── Followers / following lists ────────────────────────────────────────────────

async def get_followers(
    session: AsyncSession,
    account_id: uuid.UUID,
    params: PageParams,
) -> tuple[list[tuple[Follow, Account | None]], int]:
    """
    Return (rows, total) where each row is (Follow, follower Account).

    The Account is None for federated followers; their identity is
    Follow.external_actor_ref.
    """
    total = await _count(session, Follow.followed_account_id == account_id)
    rows_r = await session.execute(
        sa.select(Follow, Account)
        .outerjoin(Account, Account.id == Follow.follower_account_id)
        .where(Follow.followed_account_id == account_id)
        .order_by(Follow.created_at.desc(), Follow.follow_id.asc())
        .limit(params.limit)
        .offset(params.offset)
    )
    return [(f, a) for f, a in rows_r.all()], total


async def get_following(
    session: AsyncSession,
    account_id: uuid.UUID,
    params: PageParams,
) -> tuple[list[tuple[Follow, Account]], int]:
    """Return (rows, total) where each row is (Follow, followed Account)."""
    total = await _count(session, Follow.follower_account_id == account_id)
    rows_r = await session.execute(
        sa.select(Follow, Account)
        .join(Account, Account.id == Follow.followed_account_id)
        .where(Follow.follower_account_id == account_id)
        .order_by(Follow.created_at.desc(), Follow.follow_id.asc())
        .limit(params.limit)
        .offset(params.offset)
    )
    return [(f, a) for f, a in rows_r.all()], total


async def get_recent_followers(
    session: AsyncSession,
    account_id: uuid.UUID,
    limit: int,
) -> list[tuple[Follow, Account | None]]:
    rows, _ = await get_followers(session, account_id, PageParams(offset=0, limit=limit))
    return rows


# ── Aggregates and point checks ────────────────────────────────────────────────

async def get_follow_stats(session: AsyncSession, account_id: uuid.UUID) -> FollowStats:
    return FollowStats(
        follower_count=await _count(session, Follow.followed_account_id == account_id),
        following_count=await _count(session, Follow.follower_account_id == account_id),
    )


async def check_follow_status(
    session: AsyncSession,
    follower_account_id: uuid.UUID,
    followed_account_id: uuid.UUID,
) -> bool:
    return await _follow_exists(
        session, LocalFollower(account_id=follower_account_id), followed_account_id
    )


async def bulk_check_following(
    session: AsyncSession,
    follower_account_id: uuid.UUID,
    target_account_ids: Iterable[uuid.UUID],
    *,
    max_targets: int = DEFAULT_BULK_CHECK_MAX_TARGETS,
) -> dict[uuid.UUID, bool]:
    """Map every requested id to whether follower_account_id follows it. Unknown ids map to False."""
    targets = set(target_account_ids)
    if len(targets) > max_targets:
        raise TooManyTargets(max_targets)
    if not targets:
        return {}
    result = await session.execute(
        sa.select(Follow.followed_account_id).where(
            Follow.follower_account_id == follower_account_id,
            Follow.followed_account_id.in_(targets),
        )
    )
    followed = {row[0] for row in result.all()}
    return {target: target in followed for target in targets}


async def get_relationship(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    target_id: uuid.UUID,
) -> RelationshipSummary:
    """Follow and block flags between the viewer and another account, both directions."""
    return RelationshipSummary(
        following=await check_follow_status(session, viewer_id, target_id),
        followed_by=await check_follow_status(session, target_id, viewer_id),
        blocking=await block_service.is_blocked(session, viewer_id, target_id),
        blocked_by=await block_service.is_blocked(session, target_id, viewer_id),
    )
