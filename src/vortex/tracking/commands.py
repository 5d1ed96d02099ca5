"""Chat command handlers for usage queries.

This module provides the handlers behind /vortex (alias /vx):
- summary: Most and least used mods per category (default)
- clear: Reset all in-memory usage statistics
- help: List available commands
- export: Write current data to a CSV file in the config directory
- unused: List installed mods with no tracked interactions
- dataviewer: Upload current data and link to the web report

Handlers return 1 on success and 0 when the requested report has no data.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Protocol

from vortex.tracking import reporter
from vortex.tracking.reporter import CategorySummary, SummaryStatus

if TYPE_CHECKING:
    from vortex.app import VortexApp
    from vortex.tracking.categories import Category
    from vortex.upload import UploadResult

COMMAND_NAME = "vortex"
COMMAND_ALIAS = "vx"
PERMISSION_LEVEL = 2

HELP_LINES = (
    "--- Vortex Mod Help ---",
    "Vortex helps server administrators understand and optimize their modded servers.",
    "Available Commands:",
    "- /vx summary: Same as /vx",
    "- /vx clear: Resets all in-memory usage statistics.",
    "- /vx export: Exports current tracking data to a csv file in your config directory.",
    "- /vx unused: Lists mods with no tracked interactions.",
    "- /vx dataviewer: Uploads current tracking data and links to the web report.",
    "- /vx help: Displays this help message.",
)


class CommandSource(Protocol):
    """Whoever issued a command: a player, the console or a test double."""

    def send_success(self, message: str, broadcast: bool = False) -> None: ...

    def send_failure(self, message: str) -> None: ...

    def has_permission(self, level: int) -> bool: ...


class ConsoleSource:
    """Command source that writes to the terminal."""

    def __init__(self, permission_level: int = 4):
        self.permission_level = permission_level

    def send_success(self, message: str, broadcast: bool = False) -> None:
        print(message)

    def send_failure(self, message: str) -> None:
        print(message, file=sys.stderr)

    def has_permission(self, level: int) -> bool:
        return self.permission_level >= level


def format_entries(entries: list[tuple[str, int]]) -> str:
    """Format (mod ID, count) pairs one per line."""
    return "\n".join(f"{owner}: {count}" for owner, count in entries)


def display_most_used(source: CommandSource, summary: CategorySummary) -> int:
    """Send the most used mods of one category."""
    label = summary.category.display_name
    if summary.status is SummaryStatus.NO_DATA:
        source.send_success(f"No {label} data collected yet.")
        return 0

    source.send_success(
        f"--- Vortex: Most Used {label} ---\n{format_entries(summary.most_used)}"
    )
    return 1


def display_least_used(source: CommandSource, summary: CategorySummary) -> int:
    """Send the least used mods of one category that have some usage."""
    label = summary.category.display_name
    if summary.status is SummaryStatus.NO_DATA:
        source.send_success(f"No {label} data collected yet.")
        return 0

    if summary.status is SummaryStatus.NO_POSITIVE:
        source.send_success(
            f"Vortex: All {label} mods have significant usage, or no usage at all "
            f"(after filtering for > 0 usage)."
        )
        return 0

    source.send_success(
        f"--- Vortex: Least Used {label} (with some usage) ---\n"
        f"{format_entries(summary.least_used)}"
    )
    return 1


def display_category(source: CommandSource, summary: CategorySummary) -> int:
    """Send the most and least used blocks of one category.

    Returns:
        1 if the category has any data, 0 otherwise.
    """
    source.send_success("\n")
    code = display_most_used(source, summary)
    display_least_used(source, summary)
    return code


class VortexCommands:
    """Dispatches /vortex subcommands against the running app."""

    def __init__(self, app: VortexApp):
        self.app = app
        self.handlers = {
            "summary": self.summary,
            "clear": self.clear,
            "help": self.help,
            "export": self.export,
            "unused": self.unused,
            "dataviewer": self.dataviewer,
        }

    def execute(self, source: CommandSource, command_line: str) -> int:
        """Parse and run a command line such as "/vx summary".

        Returns:
            The handler's result, or 0 if the command was rejected.
        """
        tokens = command_line.strip().removeprefix("/").split()
        if not tokens or tokens[0] not in (COMMAND_NAME, COMMAND_ALIAS):
            source.send_failure(f"Unknown command: {command_line.strip()}")
            return 0

        if not source.has_permission(PERMISSION_LEVEL):
            source.send_failure("You do not have permission to use this command.")
            return 0

        subcommand = tokens[1] if len(tokens) > 1 else "summary"
        handler = self.handlers.get(subcommand)
        if handler is None:
            source.send_failure(
                f"Unknown subcommand '{subcommand}'. Use /{COMMAND_ALIAS} help."
            )
            return 0

        return handler(source)

    def summary(self, source: CommandSource) -> int:
        """Handle '/vx summary' - most and least used per category."""
        source.send_success("--- Vortex: Comprehensive Mod Usage Summary ---")
        self.report_categories(source)
        return 1

    def report_categories(self, source: CommandSource) -> dict[Category, int]:
        """Send the most/least used blocks for every category.

        Returns:
            Result code per category: 1 if it has data, 0 if not.
        """
        limit = self.app.config.tracking.report_limit
        summaries = reporter.summarize(self.app.store.snapshot_all(), limit)
        return {summary.category: display_category(source, summary) for summary in summaries}

    def clear(self, source: CommandSource) -> int:
        """Handle '/vx clear' - reset all counters."""
        self.app.store.reset()
        source.send_success("Vortex: All collected usage data has been cleared.", broadcast=True)
        return 1

    def help(self, source: CommandSource) -> int:
        """Handle '/vx help'."""
        for line in HELP_LINES:
            source.send_success(line)
        return 1

    def export(self, source: CommandSource) -> int:
        """Handle '/vx export' - write a CSV to the config directory."""
        path = self.app.export()
        if path is None:
            source.send_failure("Vortex: Failed to export data. Check server console.")
            return 0

        source.send_success(f"Vortex data exported to {path}.")
        return 1

    def unused(self, source: CommandSource) -> int:
        """Handle '/vx unused' - installed mods with no tracked interactions."""
        universe = self.app.installed_mods()
        if universe is not None:
            excluded = set(self.app.config.tracking.unused_exclusions)
            universe = {mod_id for mod_id in universe if mod_id not in excluded}

        unused = reporter.unused_owners(universe, self.app.store)

        if not unused:
            source.send_success("Vortex: No unused mods found.")
        else:
            source.send_success(f"Vortex: Unused mods: {','.join(sorted(unused))}")
        return 1

    def dataviewer(self, source: CommandSource) -> int:
        """Handle '/vx dataviewer' - upload and reply with the report link."""

        def on_complete(result: UploadResult) -> None:
            if result.success:
                source.send_success(result.message, broadcast=True)
            else:
                source.send_failure(result.message)

        source.send_success("Vortex: Uploading data...")
        self.app.upload(callback=on_complete)
        return 1
