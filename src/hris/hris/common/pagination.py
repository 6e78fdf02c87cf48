from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, page: Optional[Any], limit: Optional[Any], *, default_limit: int = DEFAULT_PAGE_SIZE) -> "PageRequest":
        try:
            p = int(page) if page not in (None, "") else 1
        except (TypeError, ValueError):
            p = 1
        try:
            lim = int(limit) if limit not in (None, "") else default_limit
        except (TypeError, ValueError):
            lim = default_limit
        return cls(page=max(p, 1), limit=min(max(lim, 1), MAX_PAGE_SIZE))


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.limit) if self.total else 0

    def metadata(self) -> dict:
        return {
            "total": self.total,
            "page": self.request.page,
            "limit": self.request.limit,
            "totalPages": self.total_pages,
        }


def paginate_list(items: Sequence[T], request: PageRequest) -> Page[T]:
    """Slice an already-filtered in-memory list (used by fakes and small tables)."""
    return Page(items=list(items[request.offset : request.offset + request.limit]), total=len(items), request=request)
