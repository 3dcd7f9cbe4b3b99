"""
Relationship service: domain exceptions.

Every precondition failure raised by the follow/block graph components is a
``RelationshipError`` subclass with a preset ``code`` and message, so call sites
never spell either out.  The controller translates ``code`` into the public
error taxonomy through ``ERROR_KIND_BY_CODE``; nothing above the controller
sees these classes.
"""


class RelationshipError(Exception):
    code: str = "unexpected"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Input ─────────────────────────────────────────────────────────────────────

class InvalidPagination(RelationshipError):
    code = "invalid_pagination"
    message = "Invalid pagination parameters."


class InvalidActorRef(RelationshipError):
    code = "invalid_actor_ref"
    message = "Invalid external actor reference."


class TooManyTargets(RelationshipError):
    code = "too_many_targets"

    def __init__(self, limit: int) -> None:
        super().__init__(f"Cannot check more than {limit} accounts at once.")


# ── Caller identity ───────────────────────────────────────────────────────────

class MissingFollowerIdentity(RelationshipError):
    code = "missing_follower_identity"
    message = "Either authentication or an actor id is required."


class AuthenticationRequired(RelationshipError):
    code = "authentication_required"
    message = "Authentication required."


class RecentFollowersForbidden(RelationshipError):
    code = "recent_followers_forbidden"
    message = "You can only view your own recent followers."


# ── Account state ─────────────────────────────────────────────────────────────

class AccountNotFound(RelationshipError):
    code = "account_not_found"
    message = "User not found."


class AccountInactive(RelationshipError):
    code = "account_inactive"
    message = "This account has been deactivated."


# ── Follow graph ──────────────────────────────────────────────────────────────

class CannotFollowSelf(RelationshipError):
    code = "follow_self"
    message = "You cannot follow yourself."


class FollowForbiddenByBlock(RelationshipError):
    """A block exists between the two accounts in one direction or the other."""

    code = "follow_blocked"
    message = "You cannot follow this user."


class AlreadyFollowing(RelationshipError):
    code = "already_following"
    message = "You are already following this user."


class NotFollowing(RelationshipError):
    code = "not_following"
    message = "You are not following this user."


# ── Block graph ───────────────────────────────────────────────────────────────

class CannotBlockSelf(RelationshipError):
    code = "block_self"
    message = "You cannot block yourself."


class AlreadyBlocked(RelationshipError):
    code = "already_blocked"
    message = "You have already blocked this user."


class NotBlocked(RelationshipError):
    code = "not_blocked"
    message = "You have not blocked this user."


class InvalidBlockReason(RelationshipError):
    code = "invalid_block_reason"
    message = "Block reason must be 500 characters or fewer."
