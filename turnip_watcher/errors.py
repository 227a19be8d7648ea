"""
Exception types for Turnip Watcher.

Every error raised by the feed client, the notifier or the monitor loop
derives from WatcherError so the entry point can report it uniformly.
"""


class WatcherError(Exception):
    """Base class for all Turnip Watcher errors."""

    pass


class FetchError(WatcherError):
    """Raised when the feed source is unreachable or rejects the request."""

    pass


class EmptyFeedError(WatcherError):
    """Raised when the feed returns no items where at least one is required."""

    pass


class NotifyError(WatcherError):
    """
    Raised when a notification could not be delivered.

    Attributes
    ----------
    status : int | None
        HTTP status code of the response, if one was received.
    body : str | None
        Response body, if one was received.
    """

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body
