from __future__ import annotations

import math

from .schemas import PaginationInfo


# PUBLIC_INTERFACE
def pagination_info(page: int, page_size: int, total_items: int) -> PaginationInfo:
    """
    Build pagination metadata for list and search responses.

    Args:
        page: The (already clamped) 1-based page number.
        page_size: The (already clamped) page size.
        total_items: Number of items matching the query, ignoring pagination.

    Returns:
        PaginationInfo where an empty result still reports a single page.
    """
    total_pages = 1 if total_items == 0 else math.ceil(total_items / page_size)
    return PaginationInfo(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )
