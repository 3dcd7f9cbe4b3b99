"""
Social graph domain: Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from parasocial.social_graph.constants import (
    ACTOR_REF_MAX_LENGTH,
    BLOCK_REASON_MAX_LENGTH,
    ErrorKind,
)

T = TypeVar("T")


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Operation result ──────────────────────────────────────────────────────────

class ErrorDetail(BaseModel):
    kind: ErrorKind
    message: str


class OperationResult(BaseModel, Generic[T]):
    """Success-with-payload or failure-with-{kind, message}; exactly one side is set."""

    ok: bool
    data: T | None = None
    error: ErrorDetail | None = None

    @classmethod
    def success(cls, data: T | None = None) -> OperationResult[T]:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> OperationResult[T]:
        return cls(ok=False, error=ErrorDetail(kind=kind, message=message))


# ── Embedded account reference ────────────────────────────────────────────────

class AccountSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    display_name: str | None = None


# ── Follow ─────────────────────────────────────────────────────────────────────

class FollowEdgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(validation_alias="follow_id")
    follower_account_id: uuid.UUID | None
    external_actor_ref: str | None
    followed_account_id: uuid.UUID
    created_at: datetime


class FollowerItem(BaseModel):
    """One follower; ``account`` is null when the follower is a federated actor."""

    id: uuid.UUID
    account: AccountSummary | None
    external_actor_ref: str | None
    created_at: datetime


class FollowingItem(BaseModel):
    id: uuid.UUID
    account: AccountSummary
    created_at: datetime


class FollowStats(BaseModel):
    follower_count: int
    following_count: int


class FollowStatus(BaseModel):
    is_following: bool
    follower: str
    followed: str


class RelationshipSummary(BaseModel):
    following: bool
    followed_by: bool
    blocking: bool
    blocked_by: bool


# ── Block ──────────────────────────────────────────────────────────────────────

class BlockEdgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(validation_alias="block_id")
    blocker_id: uuid.UUID
    blocked_id: uuid.UUID
    reason: str | None
    created_at: datetime


class BlockedItem(BaseModel):
    id: uuid.UUID
    account: AccountSummary
    reason: str | None
    created_at: datetime


# ── Requests ───────────────────────────────────────────────────────────────────

class FollowRequest(_Base):
    # Federated follows: the remote actor URI stands in for authentication
    actor_id: str | None = Field(None, max_length=ACTOR_REF_MAX_LENGTH)


class BlockRequest(_Base):
    reason: str | None = Field(None, max_length=BLOCK_REASON_MAX_LENGTH)


class BulkCheckRequest(_Base):
    usernames: list[str]
