"""
Pagination window logic for the market listing.
"""

from dataclasses import dataclass, field
from typing import Sequence

from core.models import PageWindow


def calculate_total_pages(total_items: int, page_size: int) -> int:
    """Calculate total pages. An empty collection has zero pages."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return (total_items + page_size - 1) // page_size


def page_numbers(page: int, total_pages: int, display_limit: int) -> list[int]:
    """
    Page-number controls centered on ``page``.

    The window is ``display_limit`` wide, shifted (not shrunk) when it would
    run past either end, so it is only narrower when there are fewer pages.
    """
    start = max(page - display_limit // 2, 1)
    end = min(start + display_limit - 1, total_pages)

    if end - start < display_limit - 1:
        start = max(end - display_limit + 1, 1)

    return list(range(start, end + 1))


def window(items: Sequence, page: int, page_size: int, display_limit: int) -> PageWindow:
    """
    Compute the visible slice and page controls for ``page`` (1-indexed).

    Pure: identical arguments always give an identical window.
    """
    total_items = len(items)
    total_pages = calculate_total_pages(total_items, page_size)

    start = (page - 1) * page_size
    end = start + page_size
    visible = tuple(items[max(start, 0):max(end, 0)])

    return PageWindow(
        visible=visible,
        page_numbers=tuple(page_numbers(page, total_pages, display_limit)),
        total_pages=total_pages,
        current_page=page,
        has_previous=page > 1,
        has_next=page < total_pages,
        has_more_pages=(
            total_pages > display_limit and page + display_limit // 2 < total_pages
        ),
        total_items=total_items,
    )


@dataclass
class PageState:
    """Current page per tab; switching tabs keeps each tab's position."""

    pages: dict[str, int] = field(default_factory=dict)

    def get(self, tab: str) -> int:
        return self.pages.get(tab, 1)

    def set(self, tab: str, page: int) -> None:
        self.pages[tab] = page

    def reset(self) -> None:
        self.pages.clear()
