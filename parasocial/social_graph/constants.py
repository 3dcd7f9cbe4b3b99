"""
Social graph domain: enums and limits.
"""
from __future__ import annotations

import enum

BLOCK_REASON_MAX_LENGTH: int = 500
ACTOR_REF_MAX_LENGTH: int = 2048


class FollowerKind(str, enum.Enum):
    LOCAL = "local"
    EXTERNAL = "external"


class ErrorKind(str, enum.Enum):
    """Caller-visible failure kinds. Calling layers and tests depend on these, not on messages."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_INACTIVE = "USER_INACTIVE"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    NO_FOLLOWER_IDENTITY = "NO_FOLLOWER_IDENTITY"
    FORBIDDEN = "FORBIDDEN"
    SELF_FOLLOW_ERROR = "SELF_FOLLOW_ERROR"
    SELF_BLOCK_ERROR = "SELF_BLOCK_ERROR"
    ALREADY_FOLLOWING = "ALREADY_FOLLOWING"
    NOT_FOLLOWING = "NOT_FOLLOWING"
    ALREADY_BLOCKED = "ALREADY_BLOCKED"
    NOT_BLOCKED = "NOT_BLOCKED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
