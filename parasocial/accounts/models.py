"""
Account directory: SQLAlchemy ORM model.

The relationship service only reads this table; accounts are created and
deactivated by the identity service that owns them.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    # Case-sensitive: "Alice" and "alice" are different accounts
    username: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(sa.String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true()
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )
