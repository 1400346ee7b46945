"""Command line entry point for pingwatch."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import Optional, Sequence

from ._config import DEFAULT_INTERVAL, DEFAULT_MAX_FAILURES, DEFAULT_TIMEOUT, ProbeSettings
from ._exceptions import ArgumentError, ConfigurationError
from ._log import configure_logging, console, logger
from ._loop import ProbeLoop
from ._models import AddressFamily

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def parse_threshold(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ArgumentError(f"Invalid Argument {value}: Please use a number") from None


def parse_family(value: str) -> AddressFamily:
    try:
        return AddressFamily(value)
    except ValueError:
        raise ArgumentError(f"Invalid Argument {value}: Use 'ip4' or 'ip6'") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pingwatch",
        description="Continuously ping a host and flag slow replies",
    )
    parser.add_argument("address", help="target host name or IP address")
    parser.add_argument("threshold", help="latency threshold in milliseconds")
    parser.add_argument("family", help="preferred address family: 'ip4' or 'ip6'")
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help="delay between probes in seconds",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="seconds to wait for each reply",
    )
    parser.add_argument(
        "--max-failures",
        type=int,
        default=DEFAULT_MAX_FAILURES,
        help="consecutive failed probes before giving up",
    )
    parser.add_argument(
        "--unprivileged",
        action="store_true",
        help="use an unprivileged ICMP datagram socket instead of a raw one",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse ``argv``, run the probe loop and return a process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        threshold = parse_threshold(args.threshold)
        family = parse_family(args.family)
        settings = ProbeSettings(
            threshold_ms=threshold,
            interval=args.interval,
            timeout=args.timeout,
            max_failures=args.max_failures,
            privileged=not args.unprivileged,
        )
    except ArgumentError as exc:
        logger.error("%s", exc)
        logger.error("Exiting...")
        return EXIT_USAGE

    stop_event = threading.Event()
    loop = ProbeLoop(args.address, settings, family, stop_event=stop_event)
    previous = None
    if threading.current_thread() is threading.main_thread():
        previous = signal.signal(
            signal.SIGTERM, lambda signum, frame: stop_event.set()
        )
    try:
        outcome = loop.run()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_USAGE
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return EXIT_OK
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)

    return EXIT_OK if outcome is None else EXIT_FAILURE
