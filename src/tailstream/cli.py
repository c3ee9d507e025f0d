"""Command line entry point: follow a file and copy new bytes to stdout."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import load_follow_config
from .exceptions import InvalidTargetError
from .logging_config import configure_logging
from .reader import FollowingReader

logger = logging.getLogger(__name__)

BUFSIZ = 1024


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailstream",
        description="Follow a file and write bytes appended to it to stdout (like tail -f).",
    )
    parser.add_argument("path", help="File to follow")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument(
        "--poll-interval",
        type=float,
        dest="poll_interval_seconds",
        help="Seconds between watcher stop-flag checks",
    )
    parser.add_argument(
        "--block-size",
        type=int,
        dest="read_block_size",
        help="Maximum bytes forwarded per chunk",
    )
    parser.add_argument(
        "--polling",
        action="store_const",
        const=True,
        dest="use_polling_observer",
        help="Poll the filesystem instead of using native change notifications",
    )
    parser.add_argument("--log-level", dest="log_level", help="Log level (default: INFO)")
    parser.add_argument("--log-file", help="Also write logs to this rotating file")
    return parser


def tail(reader: FollowingReader, out=None) -> int:
    """Copy the followed stream to out until it ends.

    Returns:
        Total number of bytes written.
    """
    out = out if out is not None else sys.stdout.buffer
    buffer = bytearray(BUFSIZ)
    total = 0
    while nread := reader.readinto(buffer):
        out.write(buffer[:nread])
        out.flush()
        total += nread
    return total


def main(argv: list[str] | None = None) -> int:
    """Run the tailstream command."""
    args = build_parser().parse_args(argv)

    try:
        config = load_follow_config(
            args.config,
            poll_interval_seconds=args.poll_interval_seconds,
            read_block_size=args.read_block_size,
            use_polling_observer=args.use_polling_observer,
            log_level=args.log_level,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level, args.log_file)

    try:
        with FollowingReader(args.path, config=config) as reader:
            total = tail(reader)
    except InvalidTargetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
        return 0

    logger.info(f"Stream ended after {total} bytes")
    return 0
