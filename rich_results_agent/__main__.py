"""
Rich Results Agent - command line entry point.

Usage:
    python -m rich_results_agent --url="https://example.com" \
        --x=100 --y=200 --width=800 --height=600 --output="result.png"
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .config import AgentConfig, load_config
from .error_handling import RichResultsError, format_error_message
from .runner import run_rich_results_test
from .utils import configure_logger

logger = logging.getLogger(__name__)


@dataclass
class Args:
    """Command line arguments."""
    url: str
    x: int
    y: int
    width: int
    height: int
    output: str
    retries: int
    timeout: float
    max_recovery_attempts: int
    headless: bool
    user_data_dir: Optional[str]
    screenshots_dir: str
    overlay: bool
    log_level: Optional[str]
    log_file: Optional[str]


def parse_args(argv: Optional[List[str]] = None) -> Args:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="rich-results",
        description="Run Google's Rich Results Test for a URL and capture a region of the result",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rich-results --url=https://example.com
  rich-results --url=https://example.com --x=100 --y=200 --width=800 --height=600 --output=result.png
  rich-results --url=https://example.com --headless --timeout=120
        """
    )

    parser.add_argument("--url", help="The webpage URL to test (required)")
    parser.add_argument("--x", type=int, default=0, help="X coordinate of the clip region")
    parser.add_argument("--y", type=int, default=0, help="Y coordinate of the clip region")
    parser.add_argument("--width", type=int, default=1024, help="Width of the clip region")
    parser.add_argument("--height", type=int, default=768, help="Height of the clip region")
    parser.add_argument("--output", default="rich-results.png", help="Output screenshot filename")
    parser.add_argument("--retries", type=int, default=3, help="Retries for page load and input wait")
    parser.add_argument("--timeout", type=float, default=60.0, help="Timeout in seconds")
    parser.add_argument(
        "--max-recovery-attempts",
        type=int,
        default=5,
        help="Dismiss-and-resubmit cycles allowed when the tool reports an error"
    )
    parser.add_argument("--headless", action="store_true", help="Run Chromium without a window")
    parser.add_argument("--user-data-dir", help="Persistent browser profile directory")
    parser.add_argument("--screenshots-dir", default="screenshots", help="Directory for screenshots")
    parser.add_argument(
        "--no-overlay",
        dest="overlay",
        action="store_false",
        help="Do not outline the clip region before capturing"
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--log-file", help="Also write logs to this file")

    args = parser.parse_args(argv)

    if not args.url:
        parser.error("--url is required")
    if args.retries < 0:
        parser.error("--retries must be >= 0")
    if args.timeout <= 0:
        parser.error("--timeout must be > 0")

    return Args(
        url=args.url,
        x=args.x,
        y=args.y,
        width=args.width,
        height=args.height,
        output=args.output,
        retries=args.retries,
        timeout=args.timeout,
        max_recovery_attempts=args.max_recovery_attempts,
        headless=args.headless,
        user_data_dir=args.user_data_dir,
        screenshots_dir=args.screenshots_dir,
        overlay=args.overlay,
        log_level=args.log_level,
        log_file=args.log_file,
    )


def build_config(args: Args) -> AgentConfig:
    """Merge command line arguments over environment configuration."""
    overrides = {
        "retries": args.retries,
        "timeout": args.timeout,
        "max_recovery_attempts": args.max_recovery_attempts,
        "browser": {},
        "capture": {
            "x": args.x,
            "y": args.y,
            "width": args.width,
            "height": args.height,
            "output": args.output,
            "screenshots_dir": args.screenshots_dir,
            "draw_overlay": args.overlay,
        },
    }
    if args.headless:
        overrides["browser"]["headless"] = True
    if args.user_data_dir:
        overrides["browser"]["user_data_dir"] = args.user_data_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    return load_config(**overrides)


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        configure_logger(args.log_level, args.log_file)
        logger.error(str(e))
        return 1

    # --log-level is already merged into config.log_level
    configure_logger(config.log_level, args.log_file)

    try:
        result = await run_rich_results_test(args.url, config)
    except RichResultsError as e:
        logger.error(f"❌ Error during automation: {format_error_message(e)}")
        return 1

    print(result.path)
    return 0


def cli() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli()
