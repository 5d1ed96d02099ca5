"""Process-wide wiring for vortex.

A VortexApp is created once when the server starts. It owns the shared
CounterStore and hands it to the event handler, the chat commands and the
exporters.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from datetime import date
from logging.handlers import RotatingFileHandler
from pathlib import Path

from vortex.config import Config
from vortex.events import UsageEventHandler
from vortex.export import export_csv, export_path
from vortex.tracking.commands import VortexCommands
from vortex.tracking.store import CounterStore
from vortex.upload import ReportUploader, UploadResult

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def setup_logging(log_file: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    """Attach a handler to the "vortex" logger.

    Args:
        log_file: Rotating log file. If None, logs go to stderr.
        level: Minimum level to record.

    Returns:
        The configured "vortex" logger.
    """
    root = logging.getLogger("vortex")
    root.setLevel(level)
    # Avoid adding multiple handlers if re-initialized
    if root.handlers:
        return root

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)
    return root


class VortexApp:
    """The running aggregator: store, handler, commands and adapters."""

    def __init__(
        self,
        config: Config | None = None,
        server_dir: Path | None = None,
        installed_mods: Callable[[], Iterable[str] | None] | None = None,
        uploader: ReportUploader | None = None,
    ):
        """Initialize the app.

        Args:
            config: Vortex configuration. Defaults to Config().
            server_dir: The server's root directory. Defaults to cwd.
            installed_mods: Returns every installed mod ID for unused detection.
            uploader: Report uploader. Defaults to one built from config.
        """
        self.config = config or Config()
        self.server_dir = Path(server_dir) if server_dir else Path.cwd()
        self._installed_mods = installed_mods

        self.store = CounterStore()
        self.handler = UsageEventHandler(
            self.store, reserved=self.config.tracking.reserved_namespaces
        )
        self.uploader = uploader or ReportUploader(self.config.upload)
        self.commands = VortexCommands(self)

    def installed_mods(self) -> set[str] | None:
        """Get every installed mod ID, or None if no provider is set."""
        if self._installed_mods is None:
            return None
        mods = self._installed_mods()
        return set(mods) if mods is not None else None

    def export(self, day: date | None = None) -> Path | None:
        """Export the current counts to the dated CSV file.

        Returns:
            The written path, or None if the export failed.
        """
        snapshot = self.store.snapshot_all()
        path = export_path(self.server_dir, day, self.config.export)
        return export_csv(snapshot, path)

    def upload(
        self, callback: Callable[[UploadResult], None] | None = None
    ) -> Future[UploadResult]:
        """Upload the current counts to the data viewer in the background."""
        return self.uploader.upload_async(self.store.snapshot_all(), callback)

    def on_server_stopping(self) -> Path | None:
        """Export collected data if configured, then clear the store."""
        path = None
        if self.config.export.export_on_shutdown:
            logger.info("Server stopping, exporting mod usage data")
            path = self.export()
        self.store.reset()
        return path
