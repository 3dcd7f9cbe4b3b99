import pytest

from parasocial.config import get_settings
from parasocial.main import app

API = "/api/v1/users"
ACTOR = "https://remote.example/users/alice"


@pytest.mark.asyncio
async def test_health(async_client) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "relationships"


@pytest.mark.asyncio
async def test_follow_and_unfollow(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    headers = auth_headers(alice)

    created = await async_client.post(f"{API}/bob/follow", headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["data"]["follower_account_id"] == str(alice.id)
    assert body["data"]["followed_account_id"] == str(bob.id)

    duplicate = await async_client.post(f"{API}/bob/follow", headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "ALREADY_FOLLOWING"

    removed = await async_client.delete(f"{API}/bob/follow", headers=headers)
    assert removed.status_code == 204
    assert removed.content == b""

    again = await async_client.delete(f"{API}/bob/follow", headers=headers)
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "NOT_FOLLOWING"


@pytest.mark.asyncio
async def test_follow_error_statuses(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    await make_account("ghost", is_active=False)
    headers = auth_headers(alice)

    anonymous = await async_client.post(f"{API}/alice/follow")
    assert anonymous.status_code == 401
    assert anonymous.json()["error"]["code"] == "NO_FOLLOWER_IDENTITY"

    missing = await async_client.post(f"{API}/nobody/follow", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "USER_NOT_FOUND"

    inactive = await async_client.post(f"{API}/ghost/follow", headers=headers)
    assert inactive.status_code == 403
    assert inactive.json()["error"]["code"] == "USER_INACTIVE"

    itself = await async_client.post(f"{API}/alice/follow", headers=headers)
    assert itself.status_code == 422
    assert itself.json()["error"]["code"] == "SELF_FOLLOW_ERROR"


@pytest.mark.asyncio
async def test_invalid_token_counts_as_anonymous(async_client, make_account) -> None:
    await make_account("bob")
    response = await async_client.post(
        f"{API}/bob/follow", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_FOLLOWER_IDENTITY"


@pytest.mark.asyncio
async def test_federated_follow(async_client, make_account) -> None:
    await make_account("bob")
    created = await async_client.post(f"{API}/bob/follow", json={"actor_id": ACTOR})
    assert created.status_code == 201
    assert created.json()["data"]["follower_account_id"] is None
    assert created.json()["data"]["external_actor_ref"] == ACTOR

    rejected = await async_client.post(
        f"{API}/bob/follow", json={"actor_id": "http://remote.example/users/x"}
    )
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "VALIDATION_ERROR"

    followers = await async_client.get(f"{API}/bob/followers")
    items = followers.json()["data"]["items"]
    assert items[0]["account"] is None
    assert items[0]["external_actor_ref"] == ACTOR


@pytest.mark.asyncio
async def test_followers_pagination(async_client, make_account, auth_headers) -> None:
    await make_account("target")
    for i in range(3):
        follower = await make_account(f"fan{i}")
        response = await async_client.post(f"{API}/target/follow", headers=auth_headers(follower))
        assert response.status_code == 201

    page = await async_client.get(f"{API}/target/followers", params={"limit": "2"})
    assert page.status_code == 200
    data = page.json()["data"]
    assert data["total_count"] == 3
    assert data["has_next"] is True
    assert len(data["items"]) == 2
    assert data["items"][0]["account"]["username"] == "fan2"

    lenient = await async_client.get(
        f"{API}/target/followers", params={"limit": "abc", "offset": "-1"}
    )
    assert lenient.status_code == 200
    assert len(lenient.json()["data"]["items"]) == 3

    stats = await async_client.get(f"{API}/target/stats")
    assert stats.json()["data"] == {"follower_count": 3, "following_count": 0}

    following = await async_client.get(f"{API}/fan0/following")
    assert [i["account"]["username"] for i in following.json()["data"]["items"]] == ["target"]


@pytest.mark.asyncio
async def test_strict_pagination_rejects_bad_limit(async_client, make_account, strict_settings) -> None:
    await make_account("target")
    app.dependency_overrides[get_settings] = lambda: strict_settings
    response = await async_client.get(f"{API}/target/followers", params={"limit": "1000"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_follow_checks(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    await make_account("bob")
    await async_client.post(f"{API}/bob/follow", headers=auth_headers(alice))

    single = await async_client.get(f"{API}/alice/following/bob")
    assert single.json()["data"] == {"is_following": True, "follower": "alice", "followed": "bob"}

    bulk = await async_client.post(
        f"{API}/alice/following/check", json={"usernames": ["bob", "nobody"]}
    )
    assert bulk.status_code == 200
    assert bulk.json()["data"] == {"bob": True, "nobody": False}


@pytest.mark.asyncio
async def test_recent_followers(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    await async_client.post(f"{API}/alice/follow", headers=auth_headers(bob))

    own = await async_client.get(f"{API}/alice/followers/recent", headers=auth_headers(alice))
    assert own.status_code == 200
    assert [i["account"]["username"] for i in own.json()["data"]] == ["bob"]

    other = await async_client.get(f"{API}/alice/followers/recent", headers=auth_headers(bob))
    assert other.status_code == 403
    assert other.json()["error"]["code"] == "FORBIDDEN"

    anonymous = await async_client.get(f"{API}/alice/followers/recent")
    assert anonymous.status_code == 401
    assert anonymous.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"


@pytest.mark.asyncio
async def test_block_lifecycle(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    await async_client.post(f"{API}/bob/follow", headers=auth_headers(alice))
    await async_client.post(f"{API}/alice/follow", headers=auth_headers(bob))

    blocked = await async_client.post(
        f"{API}/bob/block", headers=auth_headers(alice), json={"reason": "spam"}
    )
    assert blocked.status_code == 201
    assert blocked.json()["data"]["reason"] == "spam"

    stats = await async_client.get(f"{API}/alice/stats")
    assert stats.json()["data"] == {"follower_count": 0, "following_count": 0}

    refollow = await async_client.post(f"{API}/alice/follow", headers=auth_headers(bob))
    assert refollow.status_code == 403
    assert refollow.json()["error"]["code"] == "FORBIDDEN"

    flags = await async_client.get(f"{API}/alice/relationship", headers=auth_headers(bob))
    assert flags.json()["data"] == {
        "following": False,
        "followed_by": False,
        "blocking": False,
        "blocked_by": True,
    }

    mine = await async_client.get(f"{API}/me/blocked", headers=auth_headers(alice))
    assert mine.status_code == 200
    assert [i["account"]["username"] for i in mine.json()["data"]["items"]] == ["bob"]

    duplicate = await async_client.post(f"{API}/bob/block", headers=auth_headers(alice))
    assert duplicate.status_code == 409

    unblocked = await async_client.delete(f"{API}/bob/block", headers=auth_headers(alice))
    assert unblocked.status_code == 204
    not_blocked = await async_client.delete(f"{API}/bob/block", headers=auth_headers(alice))
    assert not_blocked.status_code == 404
    assert not_blocked.json()["error"]["code"] == "NOT_BLOCKED"


@pytest.mark.asyncio
async def test_self_block(async_client, make_account, auth_headers) -> None:
    alice = await make_account("alice")
    response = await async_client.post(f"{API}/alice/block", headers=auth_headers(alice))
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "SELF_BLOCK_ERROR"


@pytest.mark.asyncio
async def test_malformed_bodies_use_error_envelope(async_client, make_account) -> None:
    await make_account("bob")

    missing_body = await async_client.post(f"{API}/bob/following/check")
    assert missing_body.status_code == 400
    assert missing_body.json()["success"] is False
    assert missing_body.json()["error"]["code"] == "VALIDATION_ERROR"

    too_long = await async_client.post(
        f"{API}/bob/follow", json={"actor_id": "https://remote.example/" + "x" * 2100}
    )
    assert too_long.status_code == 400
    assert too_long.json()["error"]["code"] == "VALIDATION_ERROR"

    extra = await async_client.post(f"{API}/bob/follow", json={"actor_id": ACTOR, "admin": True})
    assert extra.status_code == 400
    assert extra.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "request_id" in extra.json()


@pytest.mark.asyncio
async def test_request_id_propagated(async_client) -> None:
    response = await async_client.get(
        f"{API}/nobody/stats", headers={"X-Request-ID": "req-123"}
    )
    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["request_id"] == "req-123"
