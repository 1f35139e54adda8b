"""
Page-based pagination utilities.
"""

from collections.abc import Sequence
from typing import TypeVar

from core.utils.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_LIMIT, MIN_LIMIT

ItemT = TypeVar("ItemT")


class PagePagination:
    """
    1-indexed page/limit pagination helper.

    Typical usage:
    1. Validate page and limit parameters
    2. Apply the page window to the discovered items
    3. Report total and total pages alongside the slice
    """

    @staticmethod
    def paginate(
        items: Sequence[ItemT],
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[ItemT], int]:
        """
        Slice the window ``[(page - 1) * limit, page * limit)`` out of ``items``.

        Pages past the end yield an empty slice; the total is always the
        length of the full sequence.

        Args:
            items: Full, ordered sequence of discovered items
            page: Page number, starting at 1
            limit: Maximum number of items in the page

        Returns:
            A tuple of (page_items, total_count)

        Example:
            paginate(["a", "b", "c"], page=2, limit=2)

            → (["c"], 3)
        """
        total_count = len(items)
        start = (page - 1) * limit
        return list(items[start : start + limit]), total_count

    @staticmethod
    def validate(page: int, limit: int, max_limit: int = MAX_LIMIT) -> tuple[bool, str]:
        """
        Validate pagination parameters.

        Validation rules:
        - page must be 1 or greater
        - limit must be within [MIN_LIMIT, max_limit]

        Returns:
            A tuple of:
            - is_valid: Whether parameters are valid
            - error_message: Human-readable error message if invalid
        """
        if page < DEFAULT_PAGE:
            return False, "Page must be at least 1"

        if limit < MIN_LIMIT:
            return False, f"Limit must be at least {MIN_LIMIT}"

        if limit > max_limit:
            return False, f"Limit must not exceed {max_limit}"

        return True, ""

    @staticmethod
    def total_pages(total_count: int, limit: int) -> int:
        """Number of non-empty pages; rounded up, 0 when there is nothing."""
        return (total_count + limit - 1) // limit if limit > 0 else 0
