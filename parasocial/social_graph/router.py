"""
Social graph domain: user-facing routes.

All routes prefixed /api/v1/users.

Routes:
  POST   /{username}/follow                      Follow (local caller or body actor_id)
  DELETE /{username}/follow                      Unfollow
  POST   /{username}/block                       Block (removes follow edges both ways)
  DELETE /{username}/block                       Unblock
  GET    /me/blocked                             My block list (paginated)
  GET    /{username}/followers                   Followers (paginated)
  GET    /{username}/followers/recent            My most recent followers
  GET    /{username}/following                   Following (paginated)
  POST   /{username}/following/check             Bulk follow check by usernames
  GET    /{username}/following/{target_username} Does username follow target?
  GET    /{username}/stats                       Follower / following counts
  GET    /{username}/relationship                Follow/block flags between me and username

Note: /me/... routes must be registered before /{username}/... routes of the same
shape so Starlette's literal-path matching takes precedence.
"""

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from parasocial.config import Settings, get_settings
from parasocial.database import get_db
from parasocial.rate_limit import limiter
from parasocial.social_graph import controller as ctrl
from parasocial.social_graph.constants import ErrorKind
from parasocial.social_graph.schemas import (
    BlockRequest,
    BulkCheckRequest,
    FollowRequest,
    OperationResult,
)
from shared.auth.dependencies import get_current_user_optional
from shared.middleware.error_handler import error_envelope
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["social-graph"])

HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NO_FOLLOWER_IDENTITY: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.USER_INACTIVE: status.HTTP_403_FORBIDDEN,
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOLLOWING: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_BLOCKED: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_FOLLOWING: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_BLOCKED: status.HTTP_409_CONFLICT,
    ErrorKind.SELF_FOLLOW_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.SELF_BLOCK_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _respond(
    request: Request,
    result: OperationResult,
    success_status: int = status.HTTP_200_OK,
) -> Response:
    if not result.ok:
        kind = result.error.kind
        return error_envelope(request, HTTP_STATUS_BY_KIND[kind], kind.value, result.error.message)
    if success_status == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(
        status_code=success_status,
        content={"success": True, "data": jsonable_encoder(result.data)},
    )


# ── Follow ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{username}/follow",
    status_code=status.HTTP_201_CREATED,
    summary="Follow a user",
    description=(
        "An authenticated caller follows as themselves. Without authentication, "
        "`actor_id` (an https ActivityPub actor URI) is used as the follower."
    ),
)
@limiter.limit(lambda: get_settings().follow_rate_limit)
async def follow_user(
    request: Request,
    username: str,
    body: FollowRequest | None = Body(None),
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.follow_user(
        session,
        username,
        caller=current_user,
        actor_ref=body.actor_id if body else None,
        settings=settings,
    )
    return _respond(request, result, status.HTTP_201_CREATED)


@router.delete(
    "/{username}/follow",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unfollow a user",
)
async def unfollow_user(
    request: Request,
    username: str,
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.unfollow_user(session, username, caller=current_user)
    return _respond(request, result, status.HTTP_204_NO_CONTENT)


# ── Block ──────────────────────────────────────────────────────────────────────

@router.post(
    "/{username}/block",
    status_code=status.HTTP_201_CREATED,
    summary="Block a user",
    description="Removes follow edges in both directions in the same transaction.",
)
async def block_user(
    request: Request,
    username: str,
    body: BlockRequest | None = Body(None),
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.block_user(
        session, username, caller=current_user, reason=body.reason if body else None
    )
    return _respond(request, result, status.HTTP_201_CREATED)


@router.delete(
    "/{username}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unblock a user",
)
async def unblock_user(
    request: Request,
    username: str,
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.unblock_user(session, username, caller=current_user)
    return _respond(request, result, status.HTTP_204_NO_CONTENT)


@router.get("/me/blocked", summary="My block list")
async def list_blocked(
    request: Request,
    offset: str | None = Query(None),
    limit: str | None = Query(None),
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.list_blocked(
        session, caller=current_user, offset=offset, limit=limit, settings=settings
    )
    return _respond(request, result)


# ── Lists and checks ───────────────────────────────────────────────────────────

@router.get("/{username}/followers", summary="List followers")
async def list_followers(
    request: Request,
    username: str,
    offset: str | None = Query(None),
    limit: str | None = Query(None),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.list_followers(
        session, username, offset=offset, limit=limit, settings=settings
    )
    return _respond(request, result)


@router.get("/{username}/followers/recent", summary="My most recent followers")
async def recent_followers(
    request: Request,
    username: str,
    limit: str | None = Query(None),
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.recent_followers(
        session, username, caller=current_user, limit=limit, settings=settings
    )
    return _respond(request, result)


@router.get("/{username}/following", summary="List accounts a user follows")
async def list_following(
    request: Request,
    username: str,
    offset: str | None = Query(None),
    limit: str | None = Query(None),
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.list_following(
        session, username, offset=offset, limit=limit, settings=settings
    )
    return _respond(request, result)


@router.post("/{username}/following/check", summary="Bulk follow check")
async def bulk_check_following(
    request: Request,
    username: str,
    body: BulkCheckRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    result = await ctrl.bulk_check_following(
        session, username, body.usernames, settings=settings
    )
    return _respond(request, result)


@router.get("/{username}/following/{target_username}", summary="Check follow status")
async def check_follow_status(
    request: Request,
    username: str,
    target_username: str,
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.check_follow_status(session, username, target_username)
    return _respond(request, result)


@router.get("/{username}/stats", summary="Follower and following counts")
async def follow_stats(
    request: Request,
    username: str,
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.follow_stats(session, username)
    return _respond(request, result)


@router.get("/{username}/relationship", summary="Follow and block flags between me and a user")
async def relationship(
    request: Request,
    username: str,
    current_user: CurrentUser | None = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db),
) -> Response:
    result = await ctrl.relationship(session, username, caller=current_user)
    return _respond(request, result)
