"""
Filtering of feed items.

Decides which items qualify for a notification based on keywords in
the title and on the link flair.
"""

import logging

from turnip_watcher.config import ItemFilters, KeywordFilter
from turnip_watcher.feed import FeedItem

logger = logging.getLogger(__name__)


class ItemFilter:
    """
    Combinable filter for feed items.

    Both the keyword and the flair filter must pass for an item to qualify
    (AND logic). Within each filter, include rules use OR logic and any
    exclude match rejects the item. An empty filter accepts everything.
    """

    def __init__(self, filters: ItemFilters | None = None):
        """
        Initialize the filter with configuration.

        Parameters
        ----------
        filters : ItemFilters | None
            Filter configuration to apply. None accepts every item.
        """
        self.filters = filters or ItemFilters()

    def matches(self, item: FeedItem) -> bool:
        """
        Check if an item passes all filters.

        Parameters
        ----------
        item : FeedItem
            The item to check.

        Returns
        -------
        bool
            True if the item qualifies for a notification.
        """
        result = _check_keyword_filter(
            self.filters.keywords, item.title, "keyword"
        ) and _check_keyword_filter(self.filters.flairs, item.flair, "flair")

        if not result:
            logger.debug("Item '%s' filtered out", item.title[:50])

        return result


def _check_keyword_filter(keyword_filter: KeywordFilter, text: str, kind: str) -> bool:
    """
    Check a keyword filter against a piece of text.

    Parameters
    ----------
    keyword_filter : KeywordFilter
        Include/exclude rules.
    text : str
        Text to search.
    kind : str
        Filter name used in log messages.

    Returns
    -------
    bool
        True if the text passes the filter.
    """
    if not keyword_filter.include and not keyword_filter.exclude:
        return True

    if not keyword_filter.case_sensitive:
        text = text.lower()

    def normalize(keyword: str) -> str:
        return keyword if keyword_filter.case_sensitive else keyword.lower()

    for keyword in keyword_filter.exclude:
        if normalize(keyword) in text:
            logger.debug("Item rejected: contains excluded %s '%s'", kind, keyword)
            return False

    if keyword_filter.include:
        return any(normalize(keyword) in text for keyword in keyword_filter.include)

    return True

