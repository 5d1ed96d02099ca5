"""CLI entry point for vortex.

Replays a recorded event log into a fresh store and runs the same queries
the in-game /vortex command offers.

Usage:
    python -m vortex <command> [options]

Commands:
    summary --events FILE [--limit N] [--json]
    export --events FILE [--server-dir PATH]
    unused --events FILE --installed ID[,ID...]
    dataviewer --events FILE
    help
    config validate
    config get <key>

Event log format (one JSON object per line):
    {"category": "BlockRightClick", "id": "create:cogwheel"}
    {"category": "ChunkGeneration", "id": "terralith:alpine", "position": [4, -2]}
    {"category": "CommandUsage", "id": "/vortex summary"}
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import NoReturn

from vortex import __version__

logger = logging.getLogger("vortex.cli")

# Seconds to wait for an upload beyond the configured request timeout
UPLOAD_WAIT_GRACE = 5


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="vortex",
        description="Mod usage telemetry for modded game servers",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        help="Path to config.toml (default: search config/vortex and .vortex)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to this rotating log file instead of stderr",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_replay_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--events",
            help="Event log to replay (JSON lines, use - for stdin)",
        )
        sub.add_argument(
            "--workers",
            type=int,
            default=1,
            help="Threads used to replay events (default: 1)",
        )

    # summary
    summary_parser = subparsers.add_parser(
        "summary", help="Show most and least used mods per category"
    )
    add_replay_arguments(summary_parser)
    summary_parser.add_argument(
        "--limit",
        "-n",
        type=int,
        help="Entries per list (default: tracking.report_limit)",
    )
    summary_parser.add_argument(
        "--json", action="store_true", help="Output the summary as JSON"
    )

    # export
    export_parser = subparsers.add_parser(
        "export", help="Write replayed counts to the dated CSV file"
    )
    add_replay_arguments(export_parser)
    export_parser.add_argument(
        "--server-dir",
        help="Server root directory (default: current directory)",
    )

    # unused
    unused_parser = subparsers.add_parser(
        "unused", help="List installed mods with no tracked interactions"
    )
    add_replay_arguments(unused_parser)
    unused_parser.add_argument(
        "--installed",
        action="append",
        help="Installed mod IDs, comma separated. Can be used multiple times.",
    )

    # dataviewer
    dataviewer_parser = subparsers.add_parser(
        "dataviewer", help="Upload replayed counts and print the report link"
    )
    add_replay_arguments(dataviewer_parser)

    # help
    subparsers.add_parser("help", help="Show the in-game command help")

    # config
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(
        dest="config_command", help="Config subcommands"
    )
    config_subparsers.add_parser("validate", help="Validate configuration")
    get_parser = config_subparsers.add_parser("get", help="Get configuration value")
    get_parser.add_argument("key", help="Configuration key (e.g. upload.endpoint)")

    return parser


def load_config(args: argparse.Namespace):
    """Load the configuration named on the command line, or the default."""
    from vortex.config import Config

    path = Path(args.config) if getattr(args, "config", None) else None
    return Config.load_or_default(path)


def read_events(source: str) -> tuple[list, int]:
    """Read an event log.

    Args:
        source: Path to a JSON lines file, or - for stdin.

    Returns:
        (events, skipped) where skipped counts malformed lines.
    """
    from vortex.events import UsageEvent

    if source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        lines = Path(source).read_text().splitlines()

    events = []
    skipped = 0
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            events.append(UsageEvent.from_dict(json.loads(line)))
        except (json.JSONDecodeError, ValueError, AttributeError) as e:
            logger.debug(f"Skipping malformed event {line!r}: {e}")
            skipped += 1

    return events, skipped


def build_app(args: argparse.Namespace, installed: set[str] | None = None):
    """Create a VortexApp and replay the event log into it.

    Raises:
        OSError: If the event log cannot be read.
    """
    from vortex.app import VortexApp

    config = load_config(args)
    server_dir = getattr(args, "server_dir", None)
    app = VortexApp(
        config=config,
        server_dir=Path(server_dir) if server_dir else None,
        installed_mods=(lambda: installed) if installed is not None else None,
    )

    events_source = getattr(args, "events", None)
    if not events_source:
        return app

    events, skipped = read_events(events_source)
    workers = max(1, getattr(args, "workers", 1))
    if workers == 1:
        for event in events:
            app.handler.handle(event)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(app.handler.handle, events))

    logger.debug(
        f"Replayed {len(events)} event(s), "
        f"{app.handler.processed_chunk_count} distinct chunk(s)"
    )
    if events and app.store.is_empty():
        logger.warning(f"No attributable events in {events_source}")

    if skipped:
        print(f"Skipped {skipped} malformed event(s)", file=sys.stderr)
    return app


def cmd_summary(args: argparse.Namespace) -> int:
    """Handle 'summary' command."""
    from vortex.tracking.commands import ConsoleSource
    from vortex.tracking.reporter import summarize

    try:
        app = build_app(args)
    except OSError as e:
        print(f"Error reading events: {e}", file=sys.stderr)
        return 0

    if args.limit is not None:
        if args.limit <= 0:
            print("Error: --limit must be positive", file=sys.stderr)
            return 0
        app.config.tracking = replace(app.config.tracking, report_limit=args.limit)

    if args.json:
        snapshot = app.store.snapshot_all()
        summaries = summarize(snapshot, app.config.tracking.report_limit)
        output = {
            "taken_at": snapshot.taken_at.isoformat(),
            "total": app.store.total(),
            "categories": [summary.to_dict() for summary in summaries],
        }
        print(json.dumps(output, indent=2))
        return 1

    return app.commands.summary(ConsoleSource())


def cmd_export(args: argparse.Namespace) -> int:
    """Handle 'export' command."""
    from vortex.tracking.commands import ConsoleSource

    try:
        app = build_app(args)
    except OSError as e:
        print(f"Error reading events: {e}", file=sys.stderr)
        return 0

    return app.commands.export(ConsoleSource())


def cmd_unused(args: argparse.Namespace) -> int:
    """Handle 'unused' command."""
    from vortex.tracking.commands import ConsoleSource

    installed: set[str] | None = None
    if args.installed:
        installed = {
            mod_id.strip()
            for item in args.installed
            for mod_id in item.split(",")
            if mod_id.strip()
        }

    try:
        app = build_app(args, installed=installed)
    except OSError as e:
        print(f"Error reading events: {e}", file=sys.stderr)
        return 0

    return app.commands.unused(ConsoleSource())


def cmd_dataviewer(args: argparse.Namespace) -> int:
    """Handle 'dataviewer' command.

    Unlike the in-game command, waits for the upload to finish before
    returning so the process does not exit first.
    """
    from vortex.upload import UploadFailure, UploadResult

    try:
        app = build_app(args)
    except OSError as e:
        print(f"Error reading events: {e}", file=sys.stderr)
        return 0

    print("Vortex: Uploading data...")
    wait = app.config.upload.timeout + UPLOAD_WAIT_GRACE
    try:
        result = app.upload().result(timeout=wait)
    except TimeoutError:
        logger.warning(f"No upload result after {wait}s")
        result = UploadResult(
            success=False,
            failure=UploadFailure.NETWORK,
            error=f"No response from the data viewer within {wait} seconds.",
        )

    if result.success:
        print(result.message)
        return 1

    print(result.message, file=sys.stderr)
    return 0


def cmd_help(args: argparse.Namespace) -> int:
    """Handle 'help' command."""
    from vortex.tracking.commands import HELP_LINES

    for line in HELP_LINES:
        print(line)
    return 1


def cmd_config_get(args: argparse.Namespace) -> int:
    """Handle 'config get' command."""
    try:
        config = load_config(args)
        value = config.get_value(args.key)
        print(value)
        return 1
    except KeyError:
        print(f"Error: Config key not found: {args.key}", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Error reading config: {e}", file=sys.stderr)
        return 0


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Handle 'config validate' command."""
    from vortex.config import Config

    try:
        config = Config.load(Path(args.config) if args.config else None)
        print(f"Configuration valid: {config.config_path}")
        print(f"  Version: {config.version}")
        print(f"  Reserved namespaces: {', '.join(config.tracking.reserved_namespaces)}")
        print(f"  Unused exclusions: {', '.join(config.tracking.unused_exclusions)}")
        print(f"  Report limit: {config.tracking.report_limit}")
        print(f"  Export directory: {config.export.directory}")
        print(f"  Upload endpoint: {config.upload.endpoint}")
        return 1
    except FileNotFoundError as e:
        print(f"No configuration found: {e}", file=sys.stderr)
        return 1  # Missing config is not an error
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point.

    Command handlers return 1 on success and 0 when there was nothing to
    report; the process exits 0 and 1 respectively.
    """
    from vortex.app import setup_logging

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        Path(args.log_file) if args.log_file else None,
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "summary":
        result = cmd_summary(args)
    elif args.command == "export":
        result = cmd_export(args)
    elif args.command == "unused":
        result = cmd_unused(args)
    elif args.command == "dataviewer":
        result = cmd_dataviewer(args)
    elif args.command == "help":
        result = cmd_help(args)
    elif args.command == "config":
        if args.config_command == "validate":
            result = cmd_config_validate(args)
        elif args.config_command == "get":
            result = cmd_config_get(args)
        else:
            parser.parse_args(["config", "--help"])
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)

    sys.exit(0 if result == 1 else 1)


if __name__ == "__main__":
    main()
