"""
Social graph domain: request orchestration (the relationship facade).

Every operation takes an already-authenticated caller (or None), resolves
usernames through the account directory, calls the follow/block graph and
returns an ``OperationResult``.  Precondition failures come back as results
with an ``ErrorKind`` from ``ERROR_KIND_BY_CODE``; anything unexpected is
logged and returned as INTERNAL_ERROR with a generic message.
"""
from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from parasocial.accounts.models import Account
from parasocial.accounts.service import resolve_by_username, resolve_usernames
from parasocial.config import Settings, get_settings
from parasocial.exceptions import (
    AccountNotFound,
    AuthenticationRequired,
    InvalidBlockReason,
    MissingFollowerIdentity,
    RecentFollowersForbidden,
    RelationshipError,
    TooManyTargets,
)
from parasocial.social_graph import block_service, follow_service
from parasocial.social_graph.constants import BLOCK_REASON_MAX_LENGTH, ErrorKind
from parasocial.social_graph.identity import ExternalFollower, FollowerIdentity, LocalFollower
from parasocial.social_graph.pagination import parse_limit, parse_page_params
from parasocial.social_graph.schemas import (
    AccountSummary,
    BlockEdgeOut,
    BlockedItem,
    FollowEdgeOut,
    FollowerItem,
    FollowingItem,
    FollowStats,
    FollowStatus,
    OperationResult,
    RelationshipSummary,
)
from shared.models.pagination import Page, PageParams
from shared.models.user import CurrentUser

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred."

ERROR_KIND_BY_CODE: dict[str, ErrorKind] = {
    "invalid_pagination": ErrorKind.VALIDATION_ERROR,
    "invalid_actor_ref": ErrorKind.VALIDATION_ERROR,
    "invalid_block_reason": ErrorKind.VALIDATION_ERROR,
    "too_many_targets": ErrorKind.VALIDATION_ERROR,
    "missing_follower_identity": ErrorKind.NO_FOLLOWER_IDENTITY,
    "authentication_required": ErrorKind.AUTHENTICATION_REQUIRED,
    "recent_followers_forbidden": ErrorKind.FORBIDDEN,
    "account_not_found": ErrorKind.USER_NOT_FOUND,
    "account_inactive": ErrorKind.USER_INACTIVE,
    "follow_self": ErrorKind.SELF_FOLLOW_ERROR,
    "follow_blocked": ErrorKind.FORBIDDEN,
    "already_following": ErrorKind.ALREADY_FOLLOWING,
    "not_following": ErrorKind.NOT_FOLLOWING,
    "block_self": ErrorKind.SELF_BLOCK_ERROR,
    "already_blocked": ErrorKind.ALREADY_BLOCKED,
    "not_blocked": ErrorKind.NOT_BLOCKED,
}


def _as_result(
    fn: Callable[..., Awaitable[OperationResult[Any]]],
) -> Callable[..., Awaitable[OperationResult[Any]]]:
    @functools.wraps(fn)
    async def wrapper(session: AsyncSession, *args: Any, **kwargs: Any) -> OperationResult[Any]:
        try:
            return await fn(session, *args, **kwargs)
        except RelationshipError as exc:
            kind = ERROR_KIND_BY_CODE.get(exc.code)
            if kind is None:
                logger.error("Unmapped relationship error code %r in %s", exc.code, fn.__name__)
                return OperationResult.failure(ErrorKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
            return OperationResult.failure(kind, exc.message)
        except Exception:
            logger.exception("Relationship operation %s failed", fn.__name__)
            await session.rollback()
            return OperationResult.failure(ErrorKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)

    return wrapper


# ── Identity and lookup helpers ────────────────────────────────────────────────

def resolve_follower_identity(
    caller: CurrentUser | None,
    actor_ref: str | None,
    *,
    require_https: bool = True,
) -> FollowerIdentity:
    """Authenticated caller first, then an external actor reference, else fail."""
    if caller is not None:
        return LocalFollower(account_id=caller.id)
    if actor_ref:
        return ExternalFollower.from_actor_ref(actor_ref, require_https=require_https)
    raise MissingFollowerIdentity()


def _require_caller(caller: CurrentUser | None) -> CurrentUser:
    if caller is None:
        raise AuthenticationRequired()
    return caller


async def _require_account(
    session: AsyncSession, username: str, message: str | None = None
) -> Account:
    account = await resolve_by_username(session, username) if username else None
    if account is None:
        raise AccountNotFound(message)
    return account


def _page_params(settings: Settings, offset: str | int | None, limit: str | int | None) -> PageParams:
    return parse_page_params(
        offset,
        limit,
        default_limit=settings.page_default_limit,
        max_limit=settings.page_max_limit,
        mode=settings.pagination_mode,
    )


def _follower_item(follow, account: Account | None) -> FollowerItem:
    return FollowerItem(
        id=follow.follow_id,
        account=AccountSummary.model_validate(account) if account is not None else None,
        external_actor_ref=follow.external_actor_ref,
        created_at=follow.created_at,
    )


# ── Follow ─────────────────────────────────────────────────────────────────────

@_as_result
async def follow_user(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
    actor_ref: str | None = None,
    settings: Settings | None = None,
) -> OperationResult[FollowEdgeOut]:
    settings = settings or get_settings()
    identity = resolve_follower_identity(
        caller, actor_ref, require_https=settings.actor_ref_require_https
    )
    followed = await _require_account(session, username)
    edge = await follow_service.follow_user(session, identity, followed.id)
    return OperationResult.success(FollowEdgeOut.model_validate(edge))


@_as_result
async def unfollow_user(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
) -> OperationResult[None]:
    caller = _require_caller(caller)
    followed = await _require_account(session, username)
    await follow_service.unfollow_user(session, caller.id, followed.id)
    return OperationResult.success()


@_as_result
async def list_followers(
    session: AsyncSession,
    username: str,
    *,
    offset: str | int | None = None,
    limit: str | int | None = None,
    settings: Settings | None = None,
) -> OperationResult[Page[FollowerItem]]:
    settings = settings or get_settings()
    params = _page_params(settings, offset, limit)
    account = await _require_account(session, username)
    rows, total = await follow_service.get_followers(session, account.id, params)
    items = [_follower_item(f, a) for f, a in rows]
    return OperationResult.success(Page[FollowerItem].build(items, total, params))


@_as_result
async def list_following(
    session: AsyncSession,
    username: str,
    *,
    offset: str | int | None = None,
    limit: str | int | None = None,
    settings: Settings | None = None,
) -> OperationResult[Page[FollowingItem]]:
    settings = settings or get_settings()
    params = _page_params(settings, offset, limit)
    account = await _require_account(session, username)
    rows, total = await follow_service.get_following(session, account.id, params)
    items = [
        FollowingItem(
            id=f.follow_id,
            account=AccountSummary.model_validate(a),
            created_at=f.created_at,
        )
        for f, a in rows
    ]
    return OperationResult.success(Page[FollowingItem].build(items, total, params))


@_as_result
async def follow_stats(session: AsyncSession, username: str) -> OperationResult[FollowStats]:
    account = await _require_account(session, username)
    return OperationResult.success(await follow_service.get_follow_stats(session, account.id))


@_as_result
async def check_follow_status(
    session: AsyncSession,
    username: str,
    target_username: str,
) -> OperationResult[FollowStatus]:
    follower = await _require_account(session, username, "Follower user not found.")
    target = await _require_account(session, target_username, "Target user not found.")
    is_following = await follow_service.check_follow_status(session, follower.id, target.id)
    return OperationResult.success(
        FollowStatus(is_following=is_following, follower=username, followed=target_username)
    )


@_as_result
async def bulk_check_following(
    session: AsyncSession,
    username: str,
    usernames: list[str],
    *,
    settings: Settings | None = None,
) -> OperationResult[dict[str, bool]]:
    """Keyed by the requested usernames; names that match no account are False."""
    settings = settings or get_settings()
    requested = set(usernames)
    if len(requested) > settings.bulk_check_max_targets:
        raise TooManyTargets(settings.bulk_check_max_targets)
    follower = await _require_account(session, username, "Follower user not found.")
    ids_by_name = await resolve_usernames(session, requested)
    followed = await follow_service.bulk_check_following(
        session,
        follower.id,
        ids_by_name.values(),
        max_targets=settings.bulk_check_max_targets,
    )
    return OperationResult.success(
        {name: name in ids_by_name and followed[ids_by_name[name]] for name in requested}
    )


@_as_result
async def recent_followers(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
    limit: str | int | None = None,
    settings: Settings | None = None,
) -> OperationResult[list[FollowerItem]]:
    settings = settings or get_settings()
    caller = _require_caller(caller)
    account = await _require_account(session, username)
    if caller.id != account.id:
        raise RecentFollowersForbidden()
    size = parse_limit(
        limit,
        default=settings.recent_default_limit,
        maximum=settings.recent_max_limit,
        mode=settings.pagination_mode,
    )
    rows = await follow_service.get_recent_followers(session, account.id, size)
    return OperationResult.success([_follower_item(f, a) for f, a in rows])


@_as_result
async def relationship(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
) -> OperationResult[RelationshipSummary]:
    caller = _require_caller(caller)
    target = await _require_account(session, username)
    return OperationResult.success(
        await follow_service.get_relationship(session, caller.id, target.id)
    )


# ── Block ──────────────────────────────────────────────────────────────────────

@_as_result
async def block_user(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
    reason: str | None = None,
) -> OperationResult[BlockEdgeOut]:
    caller = _require_caller(caller)
    if reason is not None and len(reason) > BLOCK_REASON_MAX_LENGTH:
        raise InvalidBlockReason()
    blocked = await _require_account(session, username)
    edge = await block_service.block_user(session, caller.id, blocked.id, reason=reason)
    return OperationResult.success(BlockEdgeOut.model_validate(edge))


@_as_result
async def unblock_user(
    session: AsyncSession,
    username: str,
    *,
    caller: CurrentUser | None,
) -> OperationResult[None]:
    caller = _require_caller(caller)
    blocked = await _require_account(session, username)
    await block_service.unblock_user(session, caller.id, blocked.id)
    return OperationResult.success()


@_as_result
async def list_blocked(
    session: AsyncSession,
    *,
    caller: CurrentUser | None,
    offset: str | int | None = None,
    limit: str | int | None = None,
    settings: Settings | None = None,
) -> OperationResult[Page[BlockedItem]]:
    settings = settings or get_settings()
    caller = _require_caller(caller)
    params = _page_params(settings, offset, limit)
    rows, total = await block_service.get_blocked(session, caller.id, params)
    items = [
        BlockedItem(
            id=b.block_id,
            account=AccountSummary.model_validate(a),
            reason=b.reason,
            created_at=b.created_at,
        )
        for b, a in rows
    ]
    return OperationResult.success(Page[BlockedItem].build(items, total, params))
