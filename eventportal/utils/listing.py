"""Client-side pagination helpers for admin tables."""
import math
from dataclasses import dataclass, field
from typing import Any, Generic, Hashable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


@dataclass
class Page(Generic[T]):
    """One page of a filtered list."""

    items: List[T]
    number: int
    total_pages: int
    total_count: int
    start_index: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def end_index(self) -> int:
        """1-based index of the last item on the page (0 when empty)."""
        return self.start_index + len(self.items)


def total_pages(count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    """Number of pages for `count` items; always at least 1."""
    if page_size <= 0:
        raise ValueError("Page size must be positive")
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """
    Slice `items` into the requested page.

    Args:
        items: Already-filtered rows, in display order
        page: 1-based page number; clamped into [1, total_pages]
        page_size: Rows per page

    Returns:
        Page with the rows for that page
    """
    pages = total_pages(len(items), page_size)
    number = min(max(1, page), pages)
    start = (number - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        number=number,
        total_pages=pages,
        total_count=len(items),
        start_index=start,
    )


@dataclass
class PageCursor:
    """
    Current page number that falls back to 1 whenever the filters change.

    The cursor remembers a fingerprint of the inputs that produced the list
    (filter values and row count). A different fingerprint resets the page.
    """

    page: int = 1
    _fingerprint: Optional[Hashable] = field(default=None, repr=False)

    def sync(self, *inputs: Any) -> int:
        """Reset to page 1 if `inputs` differ from the last call; return the page."""
        fingerprint = tuple(inputs)
        if fingerprint != self._fingerprint:
            self._fingerprint = fingerprint
            self.page = 1
        return self.page

    def go_to(self, page: int, pages: int) -> int:
        """Move to `page`, clamped into [1, pages]."""
        self.page = min(max(1, page), max(1, pages))
        return self.page
