"""
Pagination arithmetic for the admin console lists.

A :class:`Pagination` is a read-only view computed from a record count and
a page size; it is never persisted.  ``page_nums`` is the window of page
links the UI should render around the current page.
"""
import math

from pydantic import BaseModel, ConfigDict


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_page: int
    page_size: int
    page_count: int
    window_size: int
    record_count: int
    page_nums: list[int] = []

    @property
    def first_page_num(self) -> int:
        return self.page_nums[0] if self.page_nums else 0

    @property
    def last_page_num(self) -> int:
        return self.page_nums[-1] if self.page_nums else 0


def page_count(record_count: int, page_size: int) -> int:
    """Number of pages needed for *record_count* rows (0 when there are none)."""
    return math.ceil(record_count / page_size) if record_count > 0 else 0


def offset(page: int, page_size: int) -> int:
    """SQL OFFSET for the 1-based *page*."""
    return (page - 1) * page_size


def paginate(current_page: int, page_count: int, window_size: int) -> list[int]:
    """
    Return the page numbers to display for *current_page*.

    All pages are listed when they fit in the window; otherwise the window
    is centred on the current page and clamped to ``[1, page_count]``.
    """
    if page_count <= window_size:
        return list(range(1, page_count + 1))

    first = current_page - window_size // 2
    first = max(1, min(first, page_count - window_size + 1))
    return list(range(first, first + window_size))


def new_pagination(
    page: int,
    page_size: int,
    page_count: int,
    window_size: int,
    record_count: int,
) -> Pagination:
    return Pagination(
        current_page=page,
        page_size=page_size,
        page_count=page_count,
        window_size=window_size,
        record_count=record_count,
        page_nums=paginate(page, page_count, window_size),
    )
