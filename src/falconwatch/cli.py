"""Command line entry point: ``falconwatch`` / ``python -m falconwatch``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import signal
import sys
from collections.abc import Sequence

from falconwatch import __version__
from falconwatch._constants import BASE_URL
from falconwatch.client import FalconClient
from falconwatch.config import FalconConfig, parse_duration
from falconwatch.exceptions import FalconConfigError
from falconwatch.monitor import OutcomeKind
from falconwatch.poller import InventoryPoller

_logger = logging.getLogger("falconwatch")


def _duration(text: str) -> float:
    try:
        return parse_duration(text)
    except FalconConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="falconwatch",
        description="Watch the Falcon device inventory and log when devices go missing or appear.",
    )
    parser.add_argument(
        "--client-id",
        metavar="ID",
        help="OAuth client id (required; env FALCON_CLIENT_ID).",
    )
    parser.add_argument(
        "--client-secret",
        metavar="SECRET",
        help="OAuth client secret (required; env FALCON_CLIENT_SECRET).",
    )
    parser.add_argument(
        "--api-base",
        metavar="URL",
        help=f"API base url (default: {BASE_URL}; env FALCON_API_BASE).",
    )
    parser.add_argument(
        "--interval",
        type=_duration,
        metavar="1m",
        help="Sleep between checks, e.g. 30s, 1m, 1h30m (default: 1m; env FALCON_INTERVAL).",
    )
    parser.add_argument(
        "--timeout",
        type=_duration,
        metavar="1m",
        help="Per-check request timeout (default: 1m; env FALCON_REQUEST_TIMEOUT).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=None,
        help="Quiet 'same' logs (env FALCON_QUIET).",
    )
    parser.add_argument("--once", action="store_true", help="Run a single check and exit.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(args: argparse.Namespace) -> FalconConfig:
    """Merge parsed flags over ``FALCON_*`` environment variables and validate."""
    config = FalconConfig.from_env(
        client_id=args.client_id,
        client_secret=args.client_secret,
        base_url=args.api_base,
        interval=args.interval,
        request_timeout=args.timeout,
        quiet=args.quiet,
    )
    return config.validate()


async def _run(config: FalconConfig, *, once: bool) -> int:
    async with FalconClient(config) as client:
        poller = InventoryPoller(
            client.get_device_scroll,
            interval=config.interval,
            fetch_timeout=config.request_timeout,
            quiet=config.quiet,
        )
        if once:
            outcome = await poller.poll_once()
            return 1 if outcome.kind is OutcomeKind.FETCH_ERROR else 0

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop.set)
        _logger.info(
            "watching %s every %gs (timeout %gs)",
            config.devices_scroll_url,
            config.interval,
            config.request_timeout,
        )
        await poller.run(stop)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    missing = False
    if not (args.client_id or os.environ.get("FALCON_CLIENT_ID")):
        print("--client-id is required", file=sys.stderr)
        missing = True
    if not (args.client_secret or os.environ.get("FALCON_CLIENT_SECRET")):
        print("--client-secret is required", file=sys.stderr)
        missing = True
    if missing:
        parser.print_usage(sys.stderr)
        return 2

    try:
        config = load_config(args)
    except FalconConfigError as exc:
        print(f"falconwatch: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.verbose:
        # aiohttp access noise is only useful when debugging
        logging.getLogger("aiohttp").setLevel(logging.WARNING)

    return asyncio.run(_run(config, once=args.once))


if __name__ == "__main__":
    sys.exit(main())
