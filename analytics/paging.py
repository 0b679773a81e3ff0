from __future__ import annotations

"""Page slicing for attempt lists and course grids."""

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0


def paginate(items: Sequence[T], page: int = 1, per_page: int = 4) -> Page[T]:
    """Return one 1-based page; out-of-range pages are clamped."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    total_pages = math.ceil(len(items) / per_page)
    page = max(1, min(page, max(total_pages, 1)))
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, total_pages=total_pages)
