"""maillog-events — extract typed events from Postfix mail logs."""

import logging
import sys
from argparse import ArgumentParser

from maillog.config import load_config, load_yaml_config
from maillog.dispatcher import build_table
from maillog.errors import ConfigError, IngestError
from maillog.filters import build_filter_chain, parse_duration
from maillog.formatter import get_formatter
from maillog.models import Component
from maillog.reader import expand_paths
from maillog.stats import compute_stats, format_stats_json, format_stats_text
from maillog.store import EventStore

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="maillog-events",
        description="Extract connection, queue and delivery events from Postfix logs.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Mail log path(s) or glob pattern(s), e.g. /var/log/mail.log*",
    )
    parser.add_argument(
        "--within",
        help="Only events newer than this duration (e.g. 90s, 15m, 2h, 1d)",
    )
    parser.add_argument(
        "--component",
        choices=[c.value for c in Component],
        help="Only events from this subsystem",
    )
    parser.add_argument(
        "--queue-id",
        help="Only events carrying this queue id",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="Year to assume for log timestamps (default: current year)",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show statistics instead of events",
    )
    parser.add_argument(
        "--show-errors",
        action="store_true",
        help="Report unparseable lines on stderr",
    )
    return parser


def run_pipeline(args) -> int:
    """Ingest, filter and print. Returns the process exit code."""
    try:
        config = load_config(load_yaml_config(args.config))
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.getLogger().setLevel(config.log_level)

    window = None
    if args.within:
        try:
            window = parse_duration(args.within)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    try:
        paths = expand_paths(args.files)
        table = build_table(config.subsystem_aliases)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    year = args.year if args.year is not None else config.reference_year
    store = EventStore(table=table)
    try:
        for path in paths:
            store.ingest(path, reference_year=year, encoding=config.encoding)
    except IngestError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    events = store.events_within(window) if window is not None else store.all_events()
    filter_fn = build_filter_chain(args)
    events = [e for e in events if filter_fn(e)]

    if args.show_errors:
        for diag in store.diagnostics:
            print(f"{diag.source}:{diag.line_number}: {diag.error}", file=sys.stderr)

    if args.stats:
        stats = compute_stats(events, store.diagnostics)
        if args.output == "json":
            print(format_stats_json(stats))
        else:
            print(format_stats_text(stats))
        return 0

    formatter = get_formatter(output_format=args.output)
    for event in events:
        print(formatter(event))
    return 0


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [maillog] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    parser = build_parser()
    args = parser.parse_args()
    try:
        sys.exit(run_pipeline(args))
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)
