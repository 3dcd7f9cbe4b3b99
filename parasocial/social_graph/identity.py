"""
Follower identity: who is on the follower side of a follow edge.

Exactly two variants, discriminated by ``kind``:
  LocalFollower     an account in this instance
  ExternalFollower  an opaque actor URI from a federated server
"""
from __future__ import annotations

import uuid
from typing import Annotated, Literal, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from parasocial.exceptions import InvalidActorRef
from parasocial.social_graph.constants import ACTOR_REF_MAX_LENGTH, FollowerKind


class LocalFollower(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[FollowerKind.LOCAL] = FollowerKind.LOCAL
    account_id: uuid.UUID


class ExternalFollower(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[FollowerKind.EXTERNAL] = FollowerKind.EXTERNAL
    actor_ref: str

    @classmethod
    def from_actor_ref(cls, actor_ref: str, *, require_https: bool = True) -> ExternalFollower:
        validate_actor_ref(actor_ref, require_https=require_https)
        return cls(actor_ref=actor_ref)


FollowerIdentity = Annotated[
    Union[LocalFollower, ExternalFollower], Field(discriminator="kind")
]


def validate_actor_ref(actor_ref: str, *, require_https: bool = True) -> None:
    """Reject anything that cannot be an ActivityPub actor URI.

    Actors are addressed by absolute URLs with a host and a non-root path
    (``https://remote.example/users/x``).  The value is stored verbatim.
    """
    if not actor_ref or len(actor_ref) > ACTOR_REF_MAX_LENGTH:
        raise InvalidActorRef()
    try:
        parts = urlsplit(actor_ref)
    except ValueError:
        raise InvalidActorRef() from None
    allowed = ("https",) if require_https else ("https", "http")
    if parts.scheme not in allowed:
        raise InvalidActorRef("External actor reference must be an https URL.")
    if not parts.hostname or len(parts.hostname) < 3:
        raise InvalidActorRef()
    if not parts.path or parts.path == "/":
        raise InvalidActorRef()
