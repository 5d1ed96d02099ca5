"""Upload of usage reports to the web data viewer.

The report is posted as JSON; the viewer answers with {"id": "..."} and the
report can then be opened at <viewer_url>?id=<id>. Uploads run on a
background thread so the server never waits on the network.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from vortex.config import UploadConfig
from vortex.export import build_report
from vortex.tracking.store import Snapshot

logger = logging.getLogger(__name__)


class UploadFailure(Enum):
    """Why an upload did not produce a report link."""

    NETWORK = "network"
    HTTP_STATUS = "http_status"
    INVALID_RESPONSE = "invalid_response"
    MISSING_ID = "missing_id"


@dataclass
class UploadResult:
    """Result of uploading a report."""

    success: bool
    report_id: str | None = None
    url: str | None = None
    failure: UploadFailure | None = None
    status_code: int | None = None
    error: str | None = None

    @property
    def message(self) -> str:
        """Text shown to the command source."""
        if self.success:
            return f"Vortex Report Link: {self.url}"
        if self.failure is UploadFailure.NETWORK:
            return f"Vortex: Failed to generate web report. Check server console. {self.error}"
        if self.failure is UploadFailure.HTTP_STATUS:
            return (
                f"Vortex: Failed to upload report. Server responded with "
                f"{self.status_code}: {self.error}"
            )
        return f"Vortex: Error processing response from data viewer: {self.error}"


class ReportUploader:
    """Posts usage reports to the data viewer."""

    def __init__(self, config: UploadConfig | None = None, session: Any = None):
        """Initialize the uploader.

        Args:
            config: Upload settings. Defaults to UploadConfig().
            session: Object with a requests-compatible post(). Defaults to
                the requests module.
        """
        self.config = config or UploadConfig()
        self.session = session or requests

    def viewer_link(self, report_id: str) -> str:
        return f"{self.config.viewer_url}?id={report_id}"

    def upload(self, report: dict[str, Any]) -> UploadResult:
        """Post a report and wait for the viewer's answer.

        Args:
            report: The mod-first report from build_report().

        Returns:
            UploadResult with the report link or the failure reason.
        """
        try:
            response = self.session.post(
                self.config.endpoint,
                data=json.dumps(report),
                headers={"Content-Type": "application/json"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Failed to send data to {self.config.endpoint}: {e}")
            return UploadResult(success=False, failure=UploadFailure.NETWORK, error=str(e))

        if not 200 <= response.status_code < 300:
            logger.warning(
                f"Report upload rejected with {response.status_code}: {response.text}"
            )
            return UploadResult(
                success=False,
                failure=UploadFailure.HTTP_STATUS,
                status_code=response.status_code,
                error=response.text,
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"Error parsing upload response {response.text!r}: {e}")
            return UploadResult(
                success=False,
                failure=UploadFailure.INVALID_RESPONSE,
                status_code=response.status_code,
                error=str(e),
            )

        report_id = body.get("id") if isinstance(body, dict) else None
        if not report_id or not isinstance(report_id, str):
            logger.warning(f"Upload response did not contain a report ID: {body!r}")
            return UploadResult(
                success=False,
                failure=UploadFailure.MISSING_ID,
                status_code=response.status_code,
                error="Data viewer did not return a report ID.",
            )

        url = self.viewer_link(report_id)
        logger.info(f"Report uploaded: {url}")
        return UploadResult(
            success=True,
            report_id=report_id,
            url=url,
            status_code=response.status_code,
        )

    def upload_async(
        self,
        snapshot: Snapshot,
        callback: Callable[[UploadResult], None] | None = None,
    ) -> Future[UploadResult]:
        """Upload a snapshot on a background thread.

        Args:
            snapshot: The snapshot to upload. Taken by the caller so no
                store lock is held during the request.
            callback: Called with the result once the upload finishes.

        Returns:
            Future resolved with the UploadResult.
        """
        future: Future[UploadResult] = Future()
        report = build_report(snapshot)

        def task() -> None:
            if not future.set_running_or_notify_cancel():
                logger.info("Report upload cancelled before it started")
                return
            try:
                result = self.upload(report)
            except Exception as e:
                logger.error(f"Unexpected error uploading report: {e}", exc_info=True)
                result = UploadResult(
                    success=False, failure=UploadFailure.NETWORK, error=str(e)
                )
            future.set_result(result)
            if callback is not None:
                try:
                    callback(result)
                except Exception as e:
                    logger.error(f"Upload callback failed: {e}", exc_info=True)

        thread = threading.Thread(target=task, name="vortex-upload", daemon=True)
        thread.start()
        return future
