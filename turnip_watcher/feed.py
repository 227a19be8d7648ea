"""
Feed item model and the feed client interface.

A feed client returns the most recent items of the watched feed,
newest first.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, runtime_checkable

REDDIT_BASE_URL = "https://www.reddit.com"


@dataclass(frozen=True)
class FeedItem:
    """
    A single post retrieved from the watched feed.

    Attributes
    ----------
    id : str
        Feed-assigned unique identifier (Reddit fullname, e.g. "t3_abc").
    title : str
        Post title.
    url : str
        URL the post links to.
    created_at : datetime
        Creation time, timezone-aware UTC.
    flair : str
        Link flair text, empty if the post has none.
    permalink : str
        Absolute URL of the post's comment page.
    """

    id: str
    title: str
    url: str
    created_at: datetime
    flair: str = ""
    permalink: str = ""

    @classmethod
    def from_reddit(cls, data: dict[str, Any]) -> "FeedItem":
        """
        Create a FeedItem from the "data" object of a Reddit listing child.

        Parameters
        ----------
        data : dict[str, Any]
            Post attributes as returned by the Reddit API.

        Returns
        -------
        FeedItem
            Normalized item instance.

        Raises
        ------
        KeyError
            If the post has no fullname or creation time.
        ValueError
            If the creation time is not a number.
        """
        permalink = data.get("permalink") or ""
        if permalink.startswith("/"):
            permalink = f"{REDDIT_BASE_URL}{permalink}"

        return cls(
            id=data["name"],
            title=data.get("title") or "",
            url=data.get("url") or permalink,
            created_at=datetime.fromtimestamp(float(data["created_utc"]), tz=timezone.utc),
            flair=data.get("link_flair_text") or "",
            permalink=permalink,
        )

    def age(self, now: datetime | None = None) -> timedelta:
        """Return how long ago the item was created."""
        if now is None:
            now = datetime.now(timezone.utc)
        return now.astimezone(timezone.utc) - self.created_at.astimezone(timezone.utc)


@runtime_checkable
class FeedClient(Protocol):
    """
    Protocol defining the interface for feed sources.

    Implementations must return items newest first. When ``before`` is
    given, only items strictly more recent than that item are returned.
    """

    async def fetch_recent(self, limit: int, before: str | None = None) -> list[FeedItem]:
        """
        Fetch the most recent items of the feed.

        Parameters
        ----------
        limit : int
            Maximum number of items to return.
        before : str | None
            Only return items newer than the item with this id.

        Returns
        -------
        list[FeedItem]
            Items ordered newest first.

        Raises
        ------
        FetchError
            If the feed could not be fetched.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the client."""
        ...
