"""
Feed monitoring loop.

Seeds the cursor from the feed head at startup, then polls the feed on a
fixed interval and sends one notification per new item. Any error while
polling terminates the scheduler; the caller decides how to shut down.
"""

import asyncio
import enum
import logging
from datetime import datetime, timedelta, timezone

from turnip_watcher.errors import EmptyFeedError
from turnip_watcher.feed import FeedClient, FeedItem
from turnip_watcher.filters import ItemFilter
from turnip_watcher.notifier import Notifier

logger = logging.getLogger(__name__)

# Number of items requested per fetch
FETCH_LIMIT = 5

# The feed head is notified at startup only if it is younger than this
FRESHNESS_WINDOW = timedelta(minutes=30)

# Seconds between two poll starts
POLL_INTERVAL = 90


class SchedulerState(enum.Enum):
    """State of a PollScheduler."""

    IDLE = "idle"
    POLLING = "polling"
    TERMINATED = "terminated"


async def fast_forward(
    client: FeedClient,
    notifier: Notifier,
    *,
    limit: int = FETCH_LIMIT,
    freshness: timedelta = FRESHNESS_WINDOW,
    item_filter: ItemFilter | None = None,
    now: datetime | None = None,
) -> str:
    """
    Seed the cursor from the current head of the feed.

    The newest item is notified only if it is strictly younger than
    ``freshness``, as it may have been posted while the watcher was offline.

    Parameters
    ----------
    client : FeedClient
        Feed to read from.
    notifier : Notifier
        Where to send the head notification.
    limit : int
        Number of items to request.
    freshness : timedelta
        Maximum age of a head item that still gets notified.
    item_filter : ItemFilter | None
        Decides whether the head item qualifies. None accepts everything.
    now : datetime | None
        Current time, defaults to the current UTC time.

    Returns
    -------
    str
        The id of the newest item, to be used as the initial cursor.

    Raises
    ------
    FetchError
        If the feed could not be fetched.
    EmptyFeedError
        If the feed returned no items.
    NotifyError
        If the head notification could not be delivered.
    """
    logger.info("Fast forwarding to latest posts ...")
    items = await client.fetch_recent(limit)
    if not items:
        raise EmptyFeedError("No posts found in the feed, is the subreddit name correct?")

    head = items[0]
    logger.info("Fast forwarded to [%s] %s", head.id, head.title)

    if head.age(now) < freshness:
        if item_filter is None or item_filter.matches(head):
            logger.info(
                "Last post [%s] created within the last %d minutes. Notifying ...",
                head.id,
                freshness.total_seconds() // 60,
            )
            await notifier.notify(head.title, head.url)
    else:
        logger.warning(
            "Last post [%s] is older than %d minutes. Assuming it's already expired, "
            "no notification will be sent.",
            head.id,
            freshness.total_seconds() // 60,
        )

    logger.info("All caught up.")
    return head.id


async def poll_once(
    client: FeedClient,
    notifier: Notifier,
    cursor: str,
    *,
    limit: int = FETCH_LIMIT,
    item_filter: ItemFilter | None = None,
) -> tuple[str, list[FeedItem]]:
    """
    Fetch items newer than the cursor and notify each qualifying one.

    Notifications are sent one at a time, in the order the feed returned
    the items. The cursor only moves once every notification succeeded.

    Parameters
    ----------
    client : FeedClient
        Feed to read from.
    notifier : Notifier
        Where to send notifications.
    cursor : str
        Id of the last processed item.
    limit : int
        Maximum number of items to request.
    item_filter : ItemFilter | None
        Decides which items qualify. None accepts everything.

    Returns
    -------
    tuple[str, list[FeedItem]]
        The new cursor and the items fetched in this poll.

    Raises
    ------
    FetchError
        If the feed could not be fetched.
    NotifyError
        If a notification could not be delivered. The remaining items of
        the batch are not notified.
    """
    items = await client.fetch_recent(limit, before=cursor)
    if not items:
        logger.debug("No new trades found")
        return cursor, []

    logger.info(
        "Found %d new trade%s!",
        len(items),
        "" if len(items) == 1 else "s",
    )

    for item in items:
        if item_filter is not None and not item_filter.matches(item):
            continue
        logger.info("New post [%s] %s. Notifying ...", item.id, item.title)
        await notifier.notify(item.title, item.url)

    # Feed clients return newest first
    return items[0].id, items


class PollScheduler:
    """
    Fixed-interval poller owning the cursor.

    Runs at most one tick at a time. The first error moves the scheduler
    to TERMINATED, records the error and stops all further ticks.
    """

    def __init__(
        self,
        client: FeedClient,
        notifier: Notifier,
        cursor: str,
        interval: float = POLL_INTERVAL,
        limit: int = FETCH_LIMIT,
        item_filter: ItemFilter | None = None,
    ):
        """
        Initialize the scheduler.

        Parameters
        ----------
        client : FeedClient
            Feed to poll.
        notifier : Notifier
            Where to send notifications.
        cursor : str
            Id of the last processed item, usually from fast_forward().
        interval : float
            Seconds between two tick starts.
        limit : int
            Maximum number of items requested per tick.
        item_filter : ItemFilter | None
            Decides which items qualify. None accepts everything.
        """
        self.client = client
        self.notifier = notifier
        self.cursor = cursor
        self.interval = interval
        self.limit = limit
        self.item_filter = item_filter
        self.state = SchedulerState.IDLE
        self.error: Exception | None = None
        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()

    async def tick(self) -> list[FeedItem]:
        """
        Run one poll and advance the cursor.

        Returns
        -------
        list[FeedItem]
            Items fetched in this tick.

        Raises
        ------
        RuntimeError
            If a tick is already running or the scheduler has terminated.
        Exception
            Any error raised while polling; the scheduler is terminated.
        """
        if self.state is SchedulerState.TERMINATED:
            raise RuntimeError("Scheduler has terminated")
        if self._lock.locked():
            raise RuntimeError("A tick is already in progress")

        async with self._lock:
            self.state = SchedulerState.POLLING
            try:
                self.cursor, items = await poll_once(
                    self.client,
                    self.notifier,
                    self.cursor,
                    limit=self.limit,
                    item_filter=self.item_filter,
                )
            except Exception as e:
                self.state = SchedulerState.TERMINATED
                self.error = e
                raise
            self.state = SchedulerState.IDLE

        return items

    async def run(self) -> None:
        """
        Tick every ``interval`` seconds until stopped or terminated.

        Slots are anchored to the start time; slots missed because a tick
        ran long are skipped. Errors are recorded in ``error`` rather than
        raised.
        """
        loop = asyncio.get_running_loop()
        next_run = loop.time() + self.interval
        logger.info("Polling every %s seconds", self.interval)

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=max(0.0, next_run - loop.time())
                )
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.tick()
            except Exception as e:
                logger.debug("Tick failed, scheduler terminated: %r", e)
                return

            now = loop.time()
            while next_run <= now:
                next_run += self.interval
            logger.debug("Next check in %.0f seconds", next_run - now)

        logger.debug("Scheduler stopped")

    def stop(self) -> None:
        """Stop scheduling ticks. A tick in progress is allowed to finish."""
        self._stop_event.set()
