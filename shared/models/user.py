from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """Authenticated caller resolved from the JWT."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    username: str = ""
