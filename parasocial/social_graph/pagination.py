"""
Query-parameter parsing for paginated relationship lists.

Two policies, selected by ``Settings.pagination_mode``:

  lenient  absent, non-numeric or too-small values fall back to the default;
           a limit above the maximum is clamped to the maximum; a negative
           or out-of-range offset becomes 0.  Never raises.
  strict   absent values still default, but anything else that is not a
           valid in-range integer raises ``InvalidPagination``.
"""
from __future__ import annotations

from typing import Literal

from parasocial.exceptions import InvalidPagination
from shared.models.pagination import PageParams

PaginationMode = Literal["lenient", "strict"]

RawParam = str | int | None

# Largest offset passed to the database (PostgreSQL int4 range)
OFFSET_MAX = 2**31 - 1


def _to_int(raw: RawParam) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _is_absent(raw: RawParam) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_limit(
    raw: RawParam,
    *,
    default: int,
    maximum: int,
    mode: PaginationMode = "lenient",
) -> int:
    if _is_absent(raw):
        return default
    value = _to_int(raw)
    if mode == "strict":
        if value is None or not 1 <= value <= maximum:
            raise InvalidPagination(f"limit must be an integer between 1 and {maximum}.")
        return value
    if value is None or value < 1:
        return default
    return min(value, maximum)


def parse_offset(raw: RawParam, *, mode: PaginationMode = "lenient") -> int:
    if _is_absent(raw):
        return 0
    value = _to_int(raw)
    if mode == "strict":
        if value is None or value < 0 or value > OFFSET_MAX:
            raise InvalidPagination(f"offset must be an integer between 0 and {OFFSET_MAX}.")
        return value
    if value is None or value < 0 or value > OFFSET_MAX:
        return 0
    return value


def parse_page_params(
    offset: RawParam,
    limit: RawParam,
    *,
    default_limit: int = 20,
    max_limit: int = 100,
    mode: PaginationMode = "lenient",
) -> PageParams:
    return PageParams(
        offset=parse_offset(offset, mode=mode),
        limit=parse_limit(limit, default=default_limit, maximum=max_limit, mode=mode),
    )
