# main.py

"""Entry point for the dealscout headless CLI."""

import argparse
import asyncio
import logging
import sys

from dealscout.config.logging_config import setup_logging
from dealscout.scrapers.registry import supported_platforms

logger = logging.getLogger("dealscout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(supported_platforms())

    parser = argparse.ArgumentParser(
        prog="dealscout",
        description="Multi-marketplace product search and best-deal finder.",
        epilog=f"Available platforms: {valid_ids}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query.",
    )
    parser.add_argument(
        "-p",
        "--platforms",
        default=None,
        help="Comma-separated platform IDs (default: all).",
    )
    parser.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=None,
        dest="max_results",
        help="Maximum listings per platform.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        default=False,
        help="Latency-bounded search over a small platform subset.",
    )
    parser.add_argument(
        "--max-price",
        type=float,
        default=None,
        dest="max_price",
        help="Drop listings priced above this value.",
    )
    parser.add_argument(
        "--min-rating",
        type=float,
        default=None,
        dest="min_rating",
        help="Drop listings rated below this value.",
    )
    parser.add_argument(
        "--browser-mode",
        choices=["shared", "isolated"],
        default=None,
        dest="browser_mode",
        help="Rendered-fetch mode (default: BROWSER_MODE env or shared).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on all platforms.",
    )
    parser.add_argument(
        "--list-platforms",
        action="store_true",
        default=False,
        dest="list_platforms",
        help="List supported platforms and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO messages on the console.",
    )
    return parser


def _run_cli(args: argparse.Namespace) -> None:
    """Run headless CLI search and exit."""
    from dealscout.cli.runner import cli_search

    exit_code = asyncio.run(
        cli_search(
            query=args.query,
            platform_csv=args.platforms,
            max_results=args.max_results,
            output_format=args.output_format,
            quick=args.quick,
            max_price=args.max_price,
            min_rating=args.min_rating,
            browser_mode=args.browser_mode,
        )
    )
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run platform connectivity health check."""
    from dealscout.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the health check, platform list or a search."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging("INFO" if args.verbose else None)
    logger.info("dealscout starting, log file: %s", log_file)

    if args.health:
        _run_health_check()
    elif args.list_platforms:
        from dealscout.cli.runner import list_platforms

        sys.exit(list_platforms())
    elif args.query is None:
        parser.error("a search query is required")
    elif args.quick and (args.platforms or args.max_results is not None):
        parser.error(
            "--quick cannot be combined with --platforms or --max-results"
        )
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
