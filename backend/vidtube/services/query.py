# vidtube/services/query.py
"""
Read-side query building: pagination, sorting and text filters.

`paginate` is a plain function over a Tortoise QuerySet:
(filter, sort, page, limit) -> Page(results, total). The total is always a
separate count over the same filter, so it never depends on page/limit.
"""
import math
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from tortoise.expressions import Q
from tortoise.queryset import QuerySet

from vidtube.config import settings

DEFAULT_PAGE = 1
# Largest OFFSET a signed 64-bit integer can hold
MAX_OFFSET = 2**63 - 1

# Client-facing sort keys -> model fields. Anything else falls back to the default.
VIDEO_SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "views": "views",
    "duration": "duration",
}
SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT = "-created_at"


def _parse_positive_int(raw: Any, default: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def parse(cls, page: Any = None, limit: Any = None) -> "PageParams":
        """
        Lenient parsing of client pagination input.

        Non-numeric or < 1 values fall back to the defaults (page 1, limit 10);
        limit is clamped to the configured maximum and page to the last one
        whose offset the database can still represent.
        """
        lim = min(_parse_positive_int(limit, settings.default_page_limit), settings.max_page_limit)
        p = min(_parse_positive_int(page, DEFAULT_PAGE), MAX_OFFSET // lim + 1)
        return cls(page=p, limit=lim)


def parse_sort(sort_by: Optional[str], sort_type: Optional[str], allowed: dict = VIDEO_SORT_FIELDS) -> str:
    """
    Translate (sortBy, sortType) into a Tortoise order_by expression.

    Only fields in `allowed` are accepted, direction must be asc/desc;
    anything else yields the default `createdAt desc`.
    """
    if not sort_by or not sort_type:
        return DEFAULT_SORT
    column = allowed.get(sort_by)
    direction = sort_type.strip().lower()
    if column is None or direction not in SORT_DIRECTIONS:
        return DEFAULT_SORT
    return column if direction == "asc" else f"-{column}"


def text_search(term: Optional[str], *fields_: str) -> Optional[Q]:
    """Case-insensitive substring match over any of the given fields."""
    term = (term or "").strip()
    if not term:
        return None
    return Q(*[Q(**{f"{name}__icontains": term}) for name in fields_], join_type="OR")


@dataclass
class Page:
    items: List[Any]
    total: int
    params: PageParams

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.params.limit)) if self.total else 1

    def to_dict(self, items_key: str = "docs", total_key: str = "totalDocs") -> dict:
        page = self.params.page
        has_prev = page > 1
        has_next = page < self.total_pages
        return {
            items_key: self.items,
            total_key: self.total,
            "limit": self.params.limit,
            "page": page,
            "totalPages": self.total_pages,
            "pagingCounter": self.params.offset + 1,
            "hasPrevPage": has_prev,
            "hasNextPage": has_next,
            "prevPage": page - 1 if has_prev else None,
            "nextPage": page + 1 if has_next else None,
        }


async def paginate(
    qs: QuerySet,
    params: PageParams,
    order_by: str | tuple = DEFAULT_SORT,
    shape: Optional[Callable[[Any], Any]] = None,
) -> Page:
    """
    Run one page of `qs` plus a total count over the same filter.

    Args:
        qs: Filtered queryset (joins via select_related/prefetch_related allowed)
        params: Parsed page/limit
        order_by: One or more Tortoise order expressions
        shape: Optional per-row projection applied to the fetched rows
    """
    total = await qs.count()
    orders = (order_by,) if isinstance(order_by, str) else tuple(order_by)
    # Tie-break on id so pages never overlap when the sort key repeats
    if "id" not in orders and "-id" not in orders:
        orders = orders + ("-id",)
    rows = await qs.order_by(*orders).offset(params.offset).limit(params.limit)
    items = [shape(r) for r in rows] if shape else list(rows)
    return Page(items=items, total=total, params=params)
