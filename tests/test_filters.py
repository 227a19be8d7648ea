"""
Unit tests for the filtering module.

Tests cover keyword and flair matching of feed items.
"""

from collections.abc import Callable

import pytest

from turnip_watcher.config import ItemFilters, KeywordFilter
from turnip_watcher.feed import FeedItem
from turnip_watcher.filters import ItemFilter


class TestItemFilter:
    """Tests for ItemFilter.matches."""

    def test_no_filters_accepts_everything(self, make_item: Callable[..., FeedItem]) -> None:
        """Test that an unconfigured filter accepts every item."""
        item_filter = ItemFilter()

        assert item_filter.matches(make_item("t3_a", title="anything"))
        assert item_filter.matches(make_item("t3_b", title=""))

    def test_include_keyword(self, make_item: Callable[..., FeedItem]) -> None:
        """Test that include keywords use OR logic on the title."""
        item_filter = ItemFilter(
            ItemFilters(keywords=KeywordFilter(include=["selling", "daisy"]))
        )

        assert item_filter.matches(make_item("t3_a", title="Selling at 600"))
        assert item_filter.matches(make_item("t3_b", title="Daisy Mae is here"))
        assert not item_filter.matches(make_item("t3_c", title="Buying turnips"))

    def test_exclude_keyword_wins(self, make_item: Callable[..., FeedItem]) -> None:
        """Test that an excluded keyword rejects even a matching item."""
        item_filter = ItemFilter(
            ItemFilters(keywords=KeywordFilter(include=["selling"], exclude=["closed"]))
        )

        assert not item_filter.matches(make_item("t3_a", title="Selling 500 [CLOSED]"))

    def test_case_sensitive(self, make_item: Callable[..., FeedItem]) -> None:
        """Test case-sensitive matching."""
        item_filter = ItemFilter(
            ItemFilters(keywords=KeywordFilter(include=["NMT"], case_sensitive=True))
        )

        assert item_filter.matches(make_item("t3_a", title="500 bells, NMT fee"))
        assert not item_filter.matches(make_item("t3_b", title="500 bells, nmt fee"))

    @pytest.mark.parametrize(
        ("flair", "expected"),
        [("Selling", True), ("Closed", False), ("", True)],
    )
    def test_flair_exclude(
        self, make_item: Callable[..., FeedItem], flair: str, expected: bool
    ) -> None:
        """Test flair exclusion."""
        item_filter = ItemFilter(ItemFilters(flairs=KeywordFilter(exclude=["closed"])))

        assert item_filter.matches(make_item("t3_a", flair=flair)) is expected

    def test_keywords_and_flairs_combined(self, make_item: Callable[..., FeedItem]) -> None:
        """Test that keyword and flair filters must both pass."""
        item_filter = ItemFilter(
            ItemFilters(
                keywords=KeywordFilter(include=["bells"]),
                flairs=KeywordFilter(include=["selling"]),
            )
        )

        assert item_filter.matches(make_item("t3_a", title="600 bells", flair="Selling"))
        assert not item_filter.matches(make_item("t3_b", title="600 bells", flair="Buying"))
        assert not item_filter.matches(make_item("t3_c", title="Hi", flair="Selling"))
