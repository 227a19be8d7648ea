"""
Main entry point for Turnip Watcher.

Parses the command line, fast forwards to the newest post and runs the
poll scheduler until a shutdown signal or a fatal error.
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import timedelta
from urllib.parse import urlparse

import coloredlogs
import yaml
from pydantic import ValidationError

from turnip_watcher import __version__
from turnip_watcher.config import ENV_VARS, AppConfig, load_config
from turnip_watcher.errors import FetchError, WatcherError
from turnip_watcher.filters import ItemFilter
from turnip_watcher.ifttt import IftttNotifier
from turnip_watcher.monitor import PollScheduler, fast_forward
from turnip_watcher.reddit import RedditClient

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "A little Animal Crossing NH turnip marketplace subreddit monitor, sending you "
    "phone notifications via IFTTT once a new turnip trade has been opened."
)


def redact_proxy_url(proxy_url: str) -> str:
    """
    Redact credentials from a proxy URL for safe logging.

    Parameters
    ----------
    proxy_url : str
        The proxy URL potentially containing credentials.

    Returns
    -------
    str
        The proxy URL with password redacted.
    """
    try:
        parsed = urlparse(proxy_url)
        if parsed.password:
            netloc = parsed.hostname or ""
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            if parsed.username:
                netloc = f"{parsed.username}:****@{netloc}"
            return f"{parsed.scheme}://{netloc}{parsed.path}"
        return proxy_url
    except ValueError:
        return "<proxy url>"


class TurnipWatcher:
    """
    Main application.

    Wires the Reddit client, the IFTTT notifier and the poll scheduler,
    and owns the shutdown sequence.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the watcher.

        Parameters
        ----------
        config : AppConfig
            Validated application configuration.
        """
        self.config = config
        self.client: RedditClient | None = None
        self.notifier: IftttNotifier | None = None
        self.scheduler: PollScheduler | None = None
        self._shutdown = asyncio.Event()

    def request_shutdown(self) -> None:
        """Ask the watcher to stop after any in-flight step."""
        self._shutdown.set()

    async def run(self) -> None:
        """
        Run until shutdown is requested or polling fails.

        Raises
        ------
        WatcherError
            If startup or polling failed.
        """
        monitor = self.config.monitor
        proxy_url = monitor.proxy
        if proxy_url:
            logger.info("Using proxy: %s", redact_proxy_url(proxy_url))

        self.client = RedditClient(
            self.config.reddit,
            timeout=monitor.request_timeout,
            max_retries=monitor.max_retries,
            proxy_url=proxy_url,
        )
        self.notifier = IftttNotifier(
            self.config.ifttt,
            timeout=monitor.request_timeout,
            proxy_url=proxy_url,
        )
        item_filter = ItemFilter(monitor.filters)

        try:
            logger.info("Connecting to Reddit ...")
            if not await self.client.test_connection():
                raise FetchError("Could not authenticate with Reddit")

            cursor = await fast_forward(
                self.client,
                self.notifier,
                limit=monitor.fetch_limit,
                freshness=timedelta(seconds=monitor.freshness_window),
                item_filter=item_filter,
            )
            if self._shutdown.is_set():
                return

            self.scheduler = PollScheduler(
                self.client,
                self.notifier,
                cursor,
                interval=monitor.check_interval,
                limit=monitor.fetch_limit,
                item_filter=item_filter,
            )
            task = asyncio.create_task(self.scheduler.run())
            task.add_done_callback(lambda _: self._shutdown.set())

            await self._shutdown.wait()
            logger.info("Shutdown requested ...")

            self.scheduler.stop()
            await task

            if self.scheduler.error is not None:
                raise self.scheduler.error
        finally:
            await self.close()

    async def close(self) -> None:
        """Release network resources."""
        if self.client:
            await self.client.close()
        if self.notifier:
            await self.notifier.close()
        logger.debug("Resources released")


def setup_logging(verbose: bool = False) -> None:
    """
    Configure application logging.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO

    coloredlogs.install(
        level=level,
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    env_names = {field: name for name, field in ENV_VARS.items()}

    parser = argparse.ArgumentParser(
        prog="turnip-watcher",
        description=DESCRIPTION,
        epilog="http://github.com/klausklapper/turnipmon",
    )

    def credential(short: str, long: str, field: tuple[str, str], help_text: str) -> None:
        parser.add_argument(
            short,
            long,
            dest="_".join(field),
            default=None,
            help=f"[env: {env_names[field]}] Required. {help_text}",
        )

    credential("-n", "--name", ("ifttt", "event_name"), "The IFTTT web hook event name to trigger.")
    credential(
        "-k",
        "--key",
        ("ifttt", "key"),
        "Your IFTTT web hook key (see https://ifttt.com/maker_webhooks).",
    )
    credential("-i", "--id", ("reddit", "app_id"), "Your Reddit app API ID credential.")
    credential("-s", "--secret", ("reddit", "app_secret"), "Your Reddit app API secret.")
    credential("-u", "--username", ("reddit", "username"), "Your Reddit username.")
    credential("-p", "--password", ("reddit", "password"), "Your Reddit password.")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Optional path to a YAML configuration file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)

    setup_logging(args.verbose)

    overrides = {field: getattr(args, "_".join(field)) for field in ENV_VARS.values()}
    try:
        config = load_config(args.config, overrides=overrides)
    except FileNotFoundError as e:
        logger.error("%s", e)
        sys.exit(1)
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            logger.error("Invalid configuration for '%s': %s", location, error["msg"])
        logger.error("Use the --help argument for more information.")
        sys.exit(1)
    except (yaml.YAMLError, ValueError) as e:
        logger.error("Invalid configuration file: %s", e)
        sys.exit(1)

    watcher = TurnipWatcher(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler():
        logger.info("Received shutdown signal")
        watcher.request_shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    exit_code = 0
    try:
        loop.run_until_complete(watcher.run())
    except WatcherError as e:
        step = "Polling stopped" if watcher.scheduler else "Startup failed"
        logger.critical("%s: %s", step, e)
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        loop.close()

    if exit_code == 0:
        logger.info("Goodbye!")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
