"""
Shared fixtures for Turnip Watcher tests.

Provides common test fixtures for use across all test modules.
"""

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from turnip_watcher.config import AppConfig, IftttConfig, RedditConfig
from turnip_watcher.feed import FeedItem


# Path to test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed "current time" used by time-sensitive tests
NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    """Return path to sample config file."""
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def reddit_listing(fixtures_dir: Path) -> dict[str, Any]:
    """Return a decoded Reddit "new" listing."""
    return json.loads((fixtures_dir / "reddit_listing.json").read_text())


@pytest.fixture
def now() -> datetime:
    """Return the fixed current time."""
    return NOW


@pytest.fixture
def make_item() -> Callable[..., FeedItem]:
    """
    Return a factory for feed items.

    The factory takes an id and the item's age relative to NOW.
    """

    def factory(
        item_id: str,
        age: timedelta = timedelta(minutes=5),
        title: str | None = None,
        flair: str = "",
    ) -> FeedItem:
        return FeedItem(
            id=item_id,
            title=title if title is not None else f"Trade {item_id}",
            url=f"https://www.reddit.com/r/acturnips/comments/{item_id}/",
            created_at=NOW - age,
            flair=flair,
        )

    return factory


@pytest.fixture
def minimal_ifttt_config() -> IftttConfig:
    """Create a minimal valid IFTTT configuration."""
    return IftttConfig(event_name="turnip_trade", key="secret-key")


@pytest.fixture
def minimal_reddit_config() -> RedditConfig:
    """Create a minimal valid Reddit configuration."""
    return RedditConfig(
        app_id="app-id",
        app_secret="app-secret",
        username="daisy",
        password="hunter2",
    )


@pytest.fixture
def minimal_config_dict() -> dict[str, Any]:
    """
    Create a minimal valid configuration dictionary.

    Returns
    -------
    dict
        Configuration dictionary that can be used to create AppConfig.
    """
    return {
        "ifttt": {"event_name": "turnip_trade", "key": "secret-key"},
        "reddit": {
            "app_id": "app-id",
            "app_secret": "app-secret",
            "username": "daisy",
            "password": "hunter2",
        },
    }


@pytest.fixture
def minimal_app_config(
    minimal_ifttt_config: IftttConfig, minimal_reddit_config: RedditConfig
) -> AppConfig:
    """Create a minimal valid app configuration."""
    return AppConfig(ifttt=minimal_ifttt_config, reddit=minimal_reddit_config)


@pytest.fixture
def mock_client() -> MagicMock:
    """
    Create a mock feed client.

    Returns
    -------
    MagicMock
        A client that authenticates and whose fetch_recent returns no items
        by default.
    """
    client = MagicMock()
    client.test_connection = AsyncMock(return_value=True)
    client.fetch_recent = AsyncMock(return_value=[])
    client.close = AsyncMock()
    return client


@pytest.fixture
def mock_notifier() -> MagicMock:
    """
    Create a mock notifier.

    Returns
    -------
    MagicMock
        A notifier whose notify always succeeds.
    """
    notifier = MagicMock()
    notifier.notify = AsyncMock(return_value=None)
    notifier.close = AsyncMock()
    return notifier
