"""
Unit tests for services.query module.
Tests lenient pagination parsing, sort allow-listing and page metadata.
"""
import pytest

from vidtube.config import settings
from vidtube.services.query import DEFAULT_SORT, MAX_OFFSET, Page, PageParams, parse_sort, text_search


class TestPageParams:
    """Tests for PageParams.parse."""

    def test_defaults(self):
        params = PageParams.parse()
        assert params.page == 1
        assert params.limit == settings.default_page_limit

    @pytest.mark.parametrize("page,limit", [("abc", "xyz"), ("0", "0"), ("-3", "-1"), ("", " ")])
    def test_invalid_values_fall_back_to_defaults(self, page, limit):
        params = PageParams.parse(page, limit)
        assert params.page == 1
        assert params.limit == settings.default_page_limit

    def test_numeric_strings_are_accepted(self):
        params = PageParams.parse("3", "25")
        assert (params.page, params.limit) == (3, 25)
        assert params.offset == 50

    def test_limit_is_clamped(self):
        assert PageParams.parse(1, 10_000).limit == settings.max_page_limit

    @pytest.mark.parametrize("limit", ["1", "10", "100"])
    def test_huge_page_is_clamped_to_a_representable_offset(self, limit):
        params = PageParams.parse("99999999999999999999", limit)
        assert params.page == MAX_OFFSET // params.limit + 1
        assert 0 <= params.offset <= MAX_OFFSET

    def test_page_within_range_is_untouched(self):
        assert PageParams.parse("1000000", "10").page == 1_000_000


class TestParseSort:
    """Tests for parse_sort."""

    def test_missing_values_use_default(self):
        assert parse_sort(None, None) == DEFAULT_SORT
        assert parse_sort("views", None) == DEFAULT_SORT

    def test_allowed_field_and_direction(self):
        assert parse_sort("views", "asc") == "views"
        assert parse_sort("views", "DESC") == "-views"
        assert parse_sort("createdAt", "asc") == "created_at"

    def test_unknown_field_or_direction_falls_back(self):
        assert parse_sort("password_hash", "asc") == DEFAULT_SORT
        assert parse_sort("views", "sideways") == DEFAULT_SORT


def test_text_search_ignores_blank_terms():
    assert text_search("   ", "title") is None
    assert text_search(None, "title") is None
    assert text_search("cats", "title", "description") is not None


class TestPageMetadata:
    """Tests for Page.to_dict."""

    def test_middle_page(self):
        page = Page(items=["x"] * 10, total=35, params=PageParams(page=2, limit=10))
        out = page.to_dict()
        assert out["totalDocs"] == 35
        assert out["totalPages"] == 4
        assert out["pagingCounter"] == 11
        assert out["hasPrevPage"] is True and out["prevPage"] == 1
        assert out["hasNextPage"] is True and out["nextPage"] == 3

    def test_empty_result(self):
        out = Page(items=[], total=0, params=PageParams(page=1, limit=10)).to_dict("comments", "totalComments")
        assert out["comments"] == []
        assert out["totalComments"] == 0
        assert out["totalPages"] == 1
        assert out["hasNextPage"] is False and out["nextPage"] is None

    def test_page_past_the_end_keeps_total(self):
        out = Page(items=[], total=5, params=PageParams(page=9, limit=10)).to_dict()
        assert out["totalDocs"] == 5
        assert out["hasNextPage"] is False
        assert out["prevPage"] == 8
