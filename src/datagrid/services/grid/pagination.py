"""Page slicing of the grid view."""

import math
from typing import List, Optional, Sequence, Tuple, TypeVar

from datagrid.core.errors import InvalidPageSizeError

T = TypeVar("T")


class PaginationController:
    """Tracks the 1-based current page and the selected page size.

    Changing filters or sort does not move the current page; only a page size
    change resets it to the first page.
    """

    def __init__(
        self,
        page_size: int = 10,
        page_size_options: Sequence[int] = (10, 20, 50, 100),
        enabled: bool = True,
        max_visible_pages: int = 10,
    ):
        self.page_size_options = list(page_size_options)
        if page_size not in self.page_size_options:
            raise InvalidPageSizeError(page_size, self.page_size_options)
        self.page_size = page_size
        self.current_page = 1
        self.enabled = enabled
        self.max_visible_pages = max_visible_pages

    def set_page_size(self, page_size: int) -> None:
        if page_size not in self.page_size_options:
            raise InvalidPageSizeError(page_size, self.page_size_options)
        self.page_size = page_size
        self.current_page = 1

    def total_pages(self, total_rows: int) -> int:
        if not self.enabled:
            return 1
        return max(1, math.ceil(total_rows / self.page_size))

    def slice(self, view: Sequence[T]) -> List[T]:
        if not self.enabled:
            return list(view)
        start = (self.current_page - 1) * self.page_size
        return list(view[start:start + self.page_size])

    def go_to(self, page: int, total_rows: int) -> int:
        """Move to a page, clamped to the pages that exist."""
        self.current_page = max(1, min(page, self.total_pages(total_rows)))
        return self.current_page

    def first(self) -> int:
        self.current_page = 1
        return self.current_page

    def previous(self, total_rows: int) -> int:
        return self.go_to(self.current_page - 1, total_rows)

    def next(self, total_rows: int) -> int:
        return self.go_to(self.current_page + 1, total_rows)

    def last(self, total_rows: int) -> int:
        return self.go_to(self.total_pages(total_rows), total_rows)

    def visible_range(self, total_rows: int) -> Tuple[int, int]:
        """1-based (start, end) of the rows shown on the current page."""
        if total_rows == 0:
            return 0, 0
        if not self.enabled:
            return 1, total_rows
        start = (self.current_page - 1) * self.page_size + 1
        end = min(self.current_page * self.page_size, total_rows)
        if start > total_rows:
            return 0, 0
        return start, end

    def page_numbers(self, total_rows: int, max_visible: Optional[int] = None) -> List[int]:
        """Window of page numbers centred on the current page."""
        max_visible = max_visible or self.max_visible_pages
        total = self.total_pages(total_rows)
        if total <= max_visible:
            return list(range(1, total + 1))
        start = max(1, self.current_page - max_visible // 2)
        end = min(total, start + max_visible - 1)
        if end == total:
            start = max(1, end - max_visible + 1)
        return list(range(start, end + 1))
