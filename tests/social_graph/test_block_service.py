import asyncio
import uuid

import pytest

from parasocial.exceptions import (
    AlreadyBlocked,
    CannotBlockSelf,
    FollowForbiddenByBlock,
    NotBlocked,
)
from parasocial.social_graph import block_service, follow_service
from parasocial.social_graph.identity import LocalFollower
from shared.models.pagination import PageParams


@pytest.mark.asyncio
async def test_block_creates_edge(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    edge = await block_service.block_user(db_session, a.id, b.id, reason="spam")
    assert edge.blocker_id == a.id
    assert edge.blocked_id == b.id
    assert edge.reason == "spam"
    assert await block_service.is_blocked(db_session, a.id, b.id)
    assert not await block_service.is_blocked(db_session, b.id, a.id)
    assert await block_service.is_blocked_either_direction(db_session, b.id, a.id)


@pytest.mark.asyncio
async def test_block_self_rejected(db_session, make_account) -> None:
    a = await make_account()
    with pytest.raises(CannotBlockSelf):
        await block_service.block_user(db_session, a.id, a.id)


@pytest.mark.asyncio
async def test_block_twice_rejected(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    await block_service.block_user(db_session, a.id, b.id)
    with pytest.raises(AlreadyBlocked):
        await block_service.block_user(db_session, a.id, b.id)


@pytest.mark.asyncio
async def test_mutual_blocks_are_separate_edges(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    await block_service.block_user(db_session, a.id, b.id)
    await block_service.block_user(db_session, b.id, a.id)
    assert await block_service.is_blocked(db_session, a.id, b.id)
    assert await block_service.is_blocked(db_session, b.id, a.id)


@pytest.mark.asyncio
async def test_block_removes_follows_both_ways(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    c = await make_account()
    await follow_service.follow_user(db_session, LocalFollower(account_id=a.id), b.id)
    await follow_service.follow_user(db_session, LocalFollower(account_id=b.id), a.id)
    await follow_service.follow_user(db_session, LocalFollower(account_id=a.id), c.id)

    await block_service.block_user(db_session, b.id, a.id)

    assert not await follow_service.check_follow_status(db_session, a.id, b.id)
    assert not await follow_service.check_follow_status(db_session, b.id, a.id)
    assert await follow_service.check_follow_status(db_session, a.id, c.id)


@pytest.mark.asyncio
async def test_unblock(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    await follow_service.follow_user(db_session, LocalFollower(account_id=a.id), b.id)
    await block_service.block_user(db_session, a.id, b.id)
    await block_service.unblock_user(db_session, a.id, b.id)

    assert not await block_service.is_blocked(db_session, a.id, b.id)
    # Follows removed by the block stay removed.
    assert not await follow_service.check_follow_status(db_session, a.id, b.id)
    # Following is possible again.
    await follow_service.follow_user(db_session, LocalFollower(account_id=a.id), b.id)


@pytest.mark.asyncio
async def test_unblock_without_block(db_session, make_account) -> None:
    a = await make_account()
    b = await make_account()
    with pytest.raises(NotBlocked):
        await block_service.unblock_user(db_session, a.id, b.id)
    await block_service.block_user(db_session, b.id, a.id)
    # Only the blocker can lift a block.
    with pytest.raises(NotBlocked):
        await block_service.unblock_user(db_session, a.id, b.id)


@pytest.mark.asyncio
async def test_blocked_list(db_session, make_account) -> None:
    a = await make_account()
    blocked = [await make_account() for _ in range(3)]
    for other in blocked:
        await block_service.block_user(db_session, a.id, other.id)
    rows, total = await block_service.get_blocked(db_session, a.id, PageParams(limit=2))
    assert total == 3
    assert len(rows) == 2
    assert {acc.id for _, acc in rows} <= {other.id for other in blocked}
    empty, total = await block_service.get_blocked(db_session, blocked[0].id, PageParams())
    assert (empty, total) == ([], 0)


def test_pair_lock_key_is_symmetric() -> None:
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    assert block_service.pair_lock_key(a, b) == block_service.pair_lock_key(b, a)
    assert block_service.pair_lock_key(a, b) != block_service.pair_lock_key(a, c)
    assert -(2**63) <= block_service.pair_lock_key(a, b) < 2**63


async def _follow_if_allowed(session_factory, follower_id, followed_id) -> None:
    async with session_factory() as session:
        try:
            await follow_service.follow_user(session, LocalFollower(account_id=follower_id), followed_id)
            await session.commit()
        except FollowForbiddenByBlock:
            pass


async def _block(session_factory, blocker_id, blocked_id) -> None:
    async with session_factory() as session:
        await block_service.block_user(session, blocker_id, blocked_id)
        await session.commit()


@pytest.mark.asyncio
async def test_concurrent_follow_and_block_leave_no_follow_across_block(
    session_factory, make_account
) -> None:
    for _ in range(5):
        a = await make_account()
        b = await make_account()
        a_id, b_id = a.id, b.id

        await asyncio.gather(
            _follow_if_allowed(session_factory, a_id, b_id),
            _block(session_factory, b_id, a_id),
        )

        async with session_factory() as session:
            assert await block_service.is_blocked(session, b_id, a_id)
            assert not await follow_service.check_follow_status(session, a_id, b_id)
