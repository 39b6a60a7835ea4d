from __future__ import annotations

from typing import Any, Optional

from krystal.models import PaginatedResponse


class Paginator:
    """Offset bookkeeping for endpoints that return ``PaginatedResponse``."""

    def __init__(self, page_size: int):
        self.page_size = page_size
        self.current_offset = 0
        self.total_items: Optional[int] = None
        self.has_more = True

    def update_from_response(self, response: PaginatedResponse[Any]) -> None:
        self.total_items = response.total
        self.has_more = bool(response.has_more)
        self.current_offset += len(response.data)

    @property
    def has_next_page(self) -> bool:
        return self.has_more

    @property
    def next_offset(self) -> int:
        return self.current_offset

    def progress_percentage(self) -> Optional[float]:
        if self.total_items is None:
            return None
        if self.total_items == 0:
            return 100.0
        return self.current_offset / self.total_items * 100.0
