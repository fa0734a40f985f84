"""Sort-then-slice pagination shared by every list operation."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from orgspend.models.pagination import Paginated, PaginationInfo, PaginationOptions

T = TypeVar("T", bound=BaseModel)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def field_name(sort_by: str) -> str:
    """Map ``currentSpend`` style names onto model attributes."""
    return _CAMEL_BOUNDARY.sub("_", sort_by).lower()


def _sort_key(value: Any) -> tuple[int, Any]:
    # Mixed types never compare directly: rank first, then value.
    match value:
        case None:
            return (3, 0)
        case bool() | int() | float():
            return (0, float(value))
        case datetime():
            return (1, value.timestamp())
        case _:
            return (2, str(value).lower())


def sort_items(items: Sequence[T], sort_by: str, descending: bool) -> list[T]:
    """Stable sort on a named field; unknown fields leave order unchanged."""
    if not items:
        return []
    name = field_name(sort_by)
    if name not in type(items[0]).model_fields:
        return list(items)
    return sorted(items, key=lambda item: _sort_key(getattr(item, name)), reverse=descending)


def paginate(items: Sequence[T], options: PaginationOptions) -> Paginated[T]:
    """One page of ``items``, sorted first when ``options.sort_by`` is set."""
    ordered = (
        sort_items(items, options.sort_by, options.sort_order == "desc")
        if options.sort_by
        else list(items)
    )
    total = len(ordered)
    total_pages = math.ceil(total / options.limit)
    start = (options.page - 1) * options.limit
    return Paginated(
        data=ordered[start : start + options.limit],
        pagination=PaginationInfo(
            page=options.page,
            limit=options.limit,
            total=total,
            total_pages=total_pages,
            has_next=options.page < total_pages,
            has_prev=options.page > 1,
        ),
    )


def single_page(items: Sequence[T]) -> Paginated[T]:
    """Everything on one page, in the given order."""
    total = len(items)
    return Paginated(
        data=list(items),
        pagination=PaginationInfo(page=1, limit=max(total, 1), total=total, total_pages=1),
    )
