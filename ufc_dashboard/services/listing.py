"""Pagination and sort state for the list screens."""
import math
from dataclasses import dataclass, replace

from ..schemas import SortOrder


def total_pages(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(max(total, 0) / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Keep a requested page inside ``[1, max(pages, 1)]``."""
    return min(max(page, 1), max(pages, 1))


@dataclass
class Paginator:
    page_size: int
    page: int = 1
    total: int = 0

    @property
    def pages(self) -> int:
        return total_pages(self.total, self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    def update_total(self, total: int) -> int:
        """Record the filtered total and pull the current page back in range."""
        self.total = max(total, 0)
        self.page = clamp_page(self.page, self.pages)
        return self.page

    def page_moved(self, total: int) -> bool:
        """
        Apply a fresh total. True when the fetched page fell out of range and
        had to be clamped, in which case the caller must fetch again.
        """
        requested = self.page
        return self.update_total(total) != requested

    def go_to(self, page: int) -> int:
        self.page = clamp_page(page, self.pages)
        return self.page

    def next(self) -> int:
        return self.go_to(self.page + 1)

    def previous(self) -> int:
        return self.go_to(self.page - 1)

    def reset(self) -> None:
        self.page = 1


@dataclass(frozen=True)
class SortState:
    field: str
    order: SortOrder = "asc"

    def toggle(self, field: str) -> "SortState":
        """Same field flips the order, a different field starts ascending."""
        if field == self.field:
            return replace(self, order="desc" if self.order == "asc" else "asc")
        return SortState(field=field, order="asc")

    def arrow(self, field: str) -> str:
        if field != self.field:
            return ""
        return "↑" if self.order == "asc" else "↓"
