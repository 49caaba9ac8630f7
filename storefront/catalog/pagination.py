"""
Pagination helpers for the "All Products" grid.

There is always at least one page, even for an empty result, so the
grid can render its empty state on page 1.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

PAGER_WIDTH = 5


def page_count(total: int, page_size: int) -> int:
    if total <= 0:
        return 1
    return max(1, (total + page_size - 1) // page_size)


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), max(1, total_pages))


def page_window(current: int, total_pages: int, width: int = PAGER_WIDTH) -> List[int]:
    """Page numbers for a pager showing at most ``width`` buttons.

    The window starts at 1 near the beginning, ends at ``total_pages``
    near the end, and is centred on ``current`` otherwise.
    """
    if total_pages <= width:
        return list(range(1, total_pages + 1))
    half = width // 2
    if current <= half + 1:
        start = 1
    elif current >= total_pages - half:
        start = total_pages - width + 1
    else:
        start = current - half
    return list(range(start, start + width))


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    start = (page - 1) * page_size
    return list(items[start:start + page_size])
