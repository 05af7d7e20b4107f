"""Common Schemas — paged response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel

from promptserver.core.pagination import Page

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """Zero-based page of results."""
    content: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def from_page(cls, page: Page, convert) -> "PageResponse[T]":
        return cls(
            content=[convert(item) for item in page.content],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
            first=page.first,
            last=page.last,
        )
