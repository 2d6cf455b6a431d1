# ABOUTME: CLI entry point for the event store feed dumper.
# ABOUTME: Provides subcommands: dump, compare.

import argparse
import logging
import sys
from pathlib import Path

import structlog

from eventstore_dump.config import get_settings
from eventstore_dump.errors import FeedError


def configure_logging() -> None:
    """Configure structlog for console or JSON output on stderr."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        processors = [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def cmd_dump(args: argparse.Namespace) -> int:
    """Print every entry of the feed, oldest first.

    Walks back from the recent page to the first archive, then forward.
    """
    from eventstore_dump.feeds import ArchiveTraversal, FeedReader

    log = structlog.get_logger()
    log.info("cmd_dump_start")

    limit = getattr(args, "limit", None)
    count = 0

    try:
        with FeedReader() as reader:
            traversal = ArchiveTraversal(reader)
            for entry in traversal.entries():
                if limit is not None and count >= limit:
                    log.info("dump_limit_reached", limit=limit)
                    break
                print(entry.dump_line())
                count += 1

        log.info("cmd_dump_complete", entries=count)
        return 0

    except ValueError as e:
        log.error("dump_configuration_error", error=str(e))
        return 1
    except FeedError as e:
        log.error("cmd_dump_failed", error=str(e), error_type=type(e).__name__, entries=count)
        return 1


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare a source dump against a target dump."""
    from eventstore_dump.compare import compare_dumps

    log = structlog.get_logger()
    settings = get_settings()

    print(f"Source dump: {args.source}, target dump: {args.target}")

    try:
        report = compare_dumps(args.source, args.target, settings.known_aggregates)
    except OSError as e:
        log.error("cmd_compare_failed", error=str(e))
        return 1

    print(f"{len(report.source)} source records, {len(report.target)} target records")

    print("\nCompare src and target keys")
    for key in report.missing_from_target:
        print(f"key {key} not in target map")
    print(
        f"{len(report.missing_from_target)} of {len(report.source)} keys "
        "in src map missing from target map"
    )
    for key in report.missing_from_source:
        print(f"key {key} not in src map")
    print(
        f"{len(report.missing_from_source)} of {len(report.target)} keys "
        "in target map missing from src map"
    )

    print("\nCompare content")
    for key in report.differing:
        print(f"content different between maps for {key}")
        if key in report.descriptions:
            print(f"\t... => {report.descriptions[key]}")
    print(f"{len(report.differing)} values different between src map and target map")

    if report.source.duplicates or report.target.duplicates:
        print(
            f"\nDuplicate keys: {len(report.source.duplicates)} in src, "
            f"{len(report.target.duplicates)} in target"
        )

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="eventstore_dump",
        description="Dump an event store notification feed, oldest entry first",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # dump command
    dump_parser = subparsers.add_parser(
        "dump",
        help="Print every feed entry from the first archive to the most recent",
    )
    dump_parser.add_argument(
        "--limit",
        type=int,
        help="Stop after this many entries without fetching further pages",
    )

    # compare command
    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare two dump files by entry id",
    )
    compare_parser.add_argument("source", type=Path, help="Source dump file")
    compare_parser.add_argument("target", type=Path, help="Target dump file")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        # Default behavior: dump the whole feed
        args.limit = None
        return cmd_dump(args)

    commands = {
        "dump": cmd_dump,
        "compare": cmd_compare,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
