"""Pagination bar calculation."""

import math

from src.filedrop.core.models import PageNode, PaginationBar

# Pages shown on each side of the current page
WINDOW_RADIUS = 2


def build_pagination(total: int, page_size: int, current: int) -> PaginationBar:
    """Build the navigation bar for zero-based page ``current``.

    Page 1 and the last page are always reachable; pages more than
    WINDOW_RADIUS away from the current one collapse into ellipses.
    """
    if page_size <= 0:
        msg = f"page_size must be positive, got {page_size}"
        raise ValueError(msg)

    max_page = max(1, math.ceil(total / page_size))
    # 1-indexed from here on
    current += 1

    if max_page == 1 and current == 1:
        return PaginationBar(pages=[PageNode.current(1)])

    bar = PaginationBar(
        prev=current - 2 if current > 1 else None,
        next=current if current < max_page else None,
    )

    bar.pages.append(PageNode.current(1) if current == 1 else PageNode.page(1))
    if current > WINDOW_RADIUS + 2:
        bar.pages.append(PageNode.ellipsis())

    low = max(2, current - WINDOW_RADIUS)
    high = min(max_page, current + WINDOW_RADIUS)
    for number in range(low, high + 1):
        bar.pages.append(PageNode.current(number) if number == current else PageNode.page(number))

    if high < max_page - 1:
        bar.pages.append(PageNode.ellipsis())
    if high < max_page:
        bar.pages.append(PageNode.page(max_page))

    return bar
