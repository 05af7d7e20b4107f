"""Pagination — zero-based page of results with derived navigation flags.

Invariants:
    - page is zero-based; total_pages is 0 for an empty result
    - first/last are derived, never stored
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    content: list[T] = field(default_factory=list)
    page: int = 0
    size: int = 20
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page >= self.total_pages - 1

    def map(self, fn) -> "Page":
        return Page([fn(item) for item in self.content], self.page, self.size, self.total_elements)
