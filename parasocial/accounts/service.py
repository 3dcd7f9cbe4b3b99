"""
Account directory: read-only lookups consumed by the relationship graph.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from parasocial.accounts.models import Account


async def get_account(session: AsyncSession, account_id: uuid.UUID) -> Account | None:
    return await session.get(Account, account_id)


async def resolve_by_username(session: AsyncSession, username: str) -> Account | None:
    result = await session.execute(sa.select(Account).where(Account.username == username))
    return result.scalar_one_or_none()


async def resolve_usernames(
    session: AsyncSession, usernames: Iterable[str]
) -> dict[str, uuid.UUID]:
    """Map each known username to its account id. Unknown names are omitted."""
    wanted = {u for u in usernames if u}
    if not wanted:
        return {}
    result = await session.execute(
        sa.select(Account.username, Account.id).where(Account.username.in_(wanted))
    )
    return {username: account_id for username, account_id in result.all()}
