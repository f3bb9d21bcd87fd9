"""
CLI entry point for changelog-tracker.

Usage:
    python -m changelog_tracker
    python -m changelog_tracker --providers matomo,piwik-pro
    python -m changelog_tracker --dry-run --markup-dir fixtures/
    python -m changelog_tracker --serve --port 3000
"""

import argparse
import asyncio
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Track competitor changelogs into a bounded, deduplicated history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape all configured providers
  python -m changelog_tracker

  # Scrape specific providers
  python -m changelog_tracker --providers matomo,piwik-pro

  # Run against saved pages without touching the data file
  python -m changelog_tracker --markup-dir pages/ --dry-run

  # Serve the stored document at /api/updates
  python -m changelog_tracker --serve --port 3000
        """,
    )

    parser.add_argument(
        "--providers",
        type=str,
        help="Comma-separated list of provider ids to process (default: all)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to providers.yml config file",
    )

    parser.add_argument(
        "--data-file",
        type=str,
        help="Path to the JSON document (default: from config)",
    )

    parser.add_argument(
        "--markup-dir",
        type=str,
        help="Read <provider_id>.html from this directory instead of fetching",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract and merge in memory only - don't save the document",
    )

    parser.add_argument(
        "--delay",
        type=float,
        help="Seconds to wait between provider fetches (default: from config)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (default: from config)",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="Number of providers fetched in parallel (default: from config)",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the stored document over HTTP instead of scraping",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for --serve (default: 3000)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def apply_overrides(settings, args):
    """Apply CLI flags on top of config-file settings."""
    if args.data_file:
        settings.data_file = args.data_file
    if args.delay is not None:
        settings.request_delay = args.delay
    if args.timeout is not None:
        settings.timeout = args.timeout
    if args.concurrency is not None:
        if args.concurrency < 1:
            raise ValueError(f"--concurrency must be positive, got {args.concurrency}")
        settings.concurrency = args.concurrency
    return settings


async def main_async(args):
    """Async main function."""
    from .adapters.registry import ProviderRegistry
    from .config.loader import load_config
    from .core.store import JsonStore
    from .orchestrator import UpdateTracker
    from .server import start_server

    logger = structlog.get_logger(__name__)

    config = load_config(args.config)
    settings = apply_overrides(config.settings, args)
    store = JsonStore(settings.data_file)

    if args.serve:
        await start_server(store, port=args.port)
        return None

    registry = ProviderRegistry.from_configs(config.providers)
    if args.providers:
        registry = registry.only([p.strip() for p in args.providers.split(",") if p.strip()])

    logger.info(
        "starting_changelog_tracker",
        providers=[p.id for p in registry.providers],
        data_file=settings.data_file,
        dry_run=args.dry_run,
    )

    tracker = UpdateTracker(
        registry=registry,
        store=store,
        settings=settings,
        markup_dir=args.markup_dir,
    )

    result = await tracker.run(dry_run=args.dry_run)

    logger.info(
        "tracking_complete",
        total_new_updates=result.total_inserted,
        failed_providers=sorted(result.errors),
    )

    return result


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"changelog-tracker {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        asyncio.run(main_async(args))
        sys.exit(0)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
