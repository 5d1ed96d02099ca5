"""Serialization of counter snapshots.

Two shapes are produced from a Snapshot:
- CSV rows (Category,ModID,Count) written to the server's config directory
- a mod-first report dict sent to the web data viewer
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, TextIO

from vortex.config import ExportConfig
from vortex.tracking.store import Snapshot

logger = logging.getLogger(__name__)

CSV_HEADER = "Category,ModID,Count\n"
FILE_EXTENSION = ".csv"


def export_path(
    server_dir: Path,
    day: date | None = None,
    config: ExportConfig | None = None,
) -> Path:
    """Build the dated CSV path for an export.

    Args:
        server_dir: The server's root directory.
        day: Date stamped into the file name. Defaults to today.
        config: Export settings. Defaults to ExportConfig().

    Returns:
        <server_dir>/config/vortex/vortex_mod_usage_data_<YYYY-MM-DD>.csv
    """
    if config is None:
        config = ExportConfig()
    if day is None:
        day = date.today()

    file_name = f"{config.base_name}_{day.isoformat()}{FILE_EXTENSION}"
    return Path(server_dir) / config.directory / file_name


def write_csv(snapshot: Snapshot, fp: TextIO) -> int:
    """Write a snapshot as CSV rows.

    Mod IDs and category names never contain commas or newlines, so values
    are written unquoted.

    Args:
        snapshot: The snapshot to write.
        fp: Text stream to write to.

    Returns:
        Number of data rows written.
    """
    fp.write(CSV_HEADER)
    rows = 0
    for category, mapping in snapshot.items():
        for owner, count in mapping.items():
            fp.write(f"{category.value},{owner},{count}\n")
            rows += 1
    return rows


def export_csv(snapshot: Snapshot, path: Path) -> Path | None:
    """Write a snapshot to a CSV file, creating its directory.

    Args:
        snapshot: The snapshot to export.
        path: Destination file.

    Returns:
        The written path, or None if the export failed.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create export directory {path.parent}: {e}", exc_info=True)
        return None

    try:
        with open(path, "w", newline="") as f:
            rows = write_csv(snapshot, f)
    except OSError as e:
        logger.error(f"Error saving mod usage data to {path}: {e}", exc_info=True)
        return None

    logger.info(f"Mod usage data ({rows} rows) saved to {path.absolute()}")
    return path


def build_report(snapshot: Snapshot) -> dict[str, dict[str, Any]]:
    """Reshape a snapshot mod-first for the web data viewer.

    Args:
        snapshot: The snapshot to reshape.

    Returns:
        Mapping of mod ID to {"totalInteractions": int,
        "interactionBreakdown": {category report name: count}}.
    """
    report: dict[str, dict[str, Any]] = {}

    for category, mapping in snapshot.items():
        if not mapping:
            continue

        for owner, count in mapping.items():
            details = report.setdefault(
                owner, {"totalInteractions": 0, "interactionBreakdown": {}}
            )
            details["totalInteractions"] += count
            details["interactionBreakdown"][category.report_name] = count

    return report
