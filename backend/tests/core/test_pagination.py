"""Pagination — derived page counts and navigation flags."""

from promptserver.core.pagination import Page


def test_empty_page():
    page = Page([], 0, 20, 0)
    assert page.total_pages == 0
    assert page.first
    assert page.last


def test_middle_page():
    page = Page(["a"] * 10, 1, 10, 25)
    assert page.total_pages == 3
    assert not page.first
    assert not page.last


def test_last_page():
    assert Page(["a"] * 5, 2, 10, 25).last


def test_map_keeps_paging():
    page = Page([1, 2], 0, 2, 5).map(lambda x: x * 10)
    assert page.content == [10, 20]
    assert (page.page, page.size, page.total_elements) == (0, 2, 5)
