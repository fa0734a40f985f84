"""Pagination request and response models."""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginationOptions(BaseModel):
    """Page request; ``sort_by`` names any field of the paged items."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)
    sort_by: str | None = None
    sort_order: Literal["asc", "desc"] = "desc"


class PaginationInfo(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool = False
    has_prev: bool = False


class Paginated(BaseModel, Generic[T]):
    """One page of results plus its position in the full set."""

    data: list[T] = Field(default_factory=list)
    pagination: PaginationInfo
