"""
CLI script to print the latest released version of a known project.

Usage:
    latest-version-of <target>
    python -m src.cli.latest_version <target>

Examples:
    latest-version-of node
    latest-version-of ruby --log-level DEBUG

Targets and their URL/regex pairs live in config/targets.yaml.
"""

import argparse
import asyncio
import logging
import sys

from src.core.config.loader import get_targets_config
from src.core.primitives.exceptions import FetchError
from src.core.primitives.fetcher import fetch_capture, load_fetch_options

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(log_level: str) -> None:
    """
    Configure logging for the CLI.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def usage(targets: dict) -> str:
    """Usage line listing the configured target names."""
    return f"Usage: latest-version-of [ {' | '.join(sorted(targets))} ]"


async def print_latest_version(url: str, regex: str) -> bool:
    """
    Fetch url, capture the version and print it.

    Args:
        url: Page that announces the version.
        regex: Pattern whose group 1 is the version string.

    Returns:
        True if a version was printed to stdout.
    """
    try:
        result = await fetch_capture(url, regex, load_fetch_options())
    except FetchError as e:
        print(f"print_latest_version: Error: {e}", file=sys.stderr)
        return False

    if not result:
        print("print_latest_version: Error: result is empty.", file=sys.stderr)
        return False

    print(result)
    return True


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and print the version of the chosen target."""
    targets = get_targets_config()

    parser = argparse.ArgumentParser(
        description="Print the latest version of a known project"
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="Name of the target (see config/targets.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="CRITICAL",
        help="Logging level for diagnostics on stderr (default: CRITICAL)",
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    target = targets.get(args.target) if args.target else None
    if target is None:
        print(usage(targets), file=sys.stderr)
        sys.exit(1)

    if not asyncio.run(print_latest_version(target["url"], target["regex"])):
        sys.exit(1)


if __name__ == "__main__":
    main()
