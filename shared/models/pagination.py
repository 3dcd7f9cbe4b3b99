from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageParams(BaseModel):
    """Resolved offset/limit window for list queries."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, ge=1)


class Page(BaseModel, Generic[T]):
    """Offset page with the total row count and a next-page flag."""

    items: list[T]
    total_count: int
    has_next: bool

    @classmethod
    def build(cls, items: list[T], total_count: int, params: PageParams) -> "Page[T]":
        return cls(
            items=items,
            total_count=total_count,
            has_next=total_count > params.offset + len(items),
        )
