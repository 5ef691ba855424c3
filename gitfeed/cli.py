"""Command-line poller that prints the activity history to the console."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses as dc
import typing as typ
from pathlib import Path

from gitfeed.config import GitFeedConfig
from gitfeed.feed.client import FeedFetcher
from gitfeed.logging import configure_logging, get_logger, log_warning
from gitfeed.poll.controller import PollController
from gitfeed.storage.freshness import FreshnessTokenStore
from gitfeed.storage.history import HistoryStore

if typ.TYPE_CHECKING:
    from gitfeed.feed.models import Event

logger = get_logger(__name__)


def _print_history(items: tuple[Event, ...]) -> None:
    print(f"{len(items)} events")
    for event in items:
        print(f"  {event.describe()}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--resource",
        default=None,
        help="Repository slug to poll (owner/name); overrides GITFEED_RESOURCE",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for the history and token files",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between polls when running continuously",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll a single time and exit",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> GitFeedConfig:
    config = GitFeedConfig.from_env()
    overrides: dict[str, typ.Any] = {}
    if args.resource is not None:
        overrides["resource"] = args.resource
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir
    if args.interval is not None:
        if args.interval <= 0:
            msg = f"--interval must be positive, got: {args.interval}"
            raise ValueError(msg)
        overrides["poll_interval_s"] = args.interval
    return dc.replace(config, **overrides) if overrides else config


async def _run(config: GitFeedConfig, *, once: bool) -> int:
    fetcher = FeedFetcher(config.client_config())
    controller = PollController(
        config.resource,
        fetcher,
        HistoryStore(config.history_path, max_size=config.max_events),
        FreshnessTokenStore(config.token_path),
    )
    controller.add_history_listener(_print_history)
    try:
        if controller.start():
            _print_history(controller.items)
        if once:
            outcome = await controller.poll_once()
            if outcome.failed:
                print(f"Poll failed: {outcome.message}")
                return 1
            return 0
        await controller.run(config.poll_interval_s)
    finally:
        await fetcher.aclose()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Poll the configured resource and print its history.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when configuration is invalid or a single
        poll failed.

    """
    args = _build_parser().parse_args(argv)
    try:
        config = _resolve_config(args)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        return 1

    _level, invalid = configure_logging(config.log_level)
    if invalid:
        log_warning(logger, "Unknown GITFEED_LOG_LEVEL %r; using INFO", config.log_level)

    try:
        return asyncio.run(_run(config, once=args.once))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
