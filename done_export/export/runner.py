"""
Export runner: the trigger binding around ExportPipeline.

One runner serves one trigger (button, CLI invocation). It owns the busy
flag and the run log, and is the single place where run failures are
caught: idle → running → idle, with exactly one terminal state per run.
"""

import logging
import time
from datetime import datetime
from pathlib import Path

from done_export.core.models import ExportConfig, ExportResult
from done_export.core.timestamps import utcnow
from done_export.export.pipeline import ExportPipeline
from done_export.export.run_log import LogListener, RunLog
from done_export.observability import metrics
from done_export.observability.logger import get_logger
from done_export.sharepoint.context import SharePointContext

logger = get_logger(__name__)


def describe_error(error: BaseException) -> str:
    """Human-readable text of an error, falling back to its type name."""
    return str(error).strip() or type(error).__name__


class ExportRunner:
    """
    Runs exports on demand, at most one at a time.

    While a run is in flight the trigger is disabled: further trigger()
    calls return None without starting anything. There are no retries and
    no cancellation.

    Usage:
        runner = ExportRunner(context, config, listener=print)
        result = await runner.trigger()
    """

    def __init__(
        self,
        context: SharePointContext,
        config: ExportConfig,
        pipeline: ExportPipeline | None = None,
        listener: LogListener | None = None,
    ):
        """
        Initialize export runner.

        Args:
            context: Remote list and document store access
            config: Export configuration used for every run
            pipeline: Pipeline to run (defaults to ExportPipeline(context))
            listener: Called with every run log line
        """
        self.context = context
        self.config = config
        self.pipeline = pipeline or ExportPipeline(context)
        self.run_log = RunLog(listener)
        self.last_result: ExportResult | None = None
        self._busy = False

    @property
    def busy(self) -> bool:
        """True while a run is in flight."""
        return self._busy

    @property
    def enabled(self) -> bool:
        """Whether the trigger accepts a new run."""
        return not self._busy

    @property
    def log(self) -> list[str]:
        """Lines of the current (or last) run."""
        return self.run_log.lines

    async def trigger(
        self,
        now: datetime | None = None,
        dry_run: bool = False,
        output_path: str | Path | None = None,
    ) -> ExportResult | None:
        """
        Start one export run.

        Args:
            now: Reference time for the run (defaults to now)
            dry_run: Fetch and encode, but do not upload
            output_path: Also write the CSV to this local file

        Returns:
            ExportResult of the run, or None if a run was already in flight
        """
        if self._busy:
            logger.warning(
                "Export already running, trigger ignored",
                extra={"list_title": self.config.list_title},
            )
            return None

        self._busy = True
        self.run_log.reset()
        metrics.set_gauge(metrics.run_in_progress, 1, list_title=self.config.list_title)
        started = time.monotonic()
        started_at = now or utcnow()

        try:
            result = await self.pipeline.execute(
                self.config,
                self.run_log,
                now=started_at,
                dry_run=dry_run,
                output_path=output_path,
            )
        except Exception as e:
            message = describe_error(e)
            logger.error(
                f"Export failed: {message}",
                extra={"list_title": self.config.list_title, "error_type": type(e).__name__},
                exc_info=True,
            )
            self.run_log.append(f"Error: {message}", level=logging.ERROR)
            result = ExportResult(
                status="failed",
                list_title=self.config.list_title,
                message=message,
                started_at=started_at,
                finished_at=utcnow(),
            )
        finally:
            self._busy = False
            metrics.set_gauge(metrics.run_in_progress, 0, list_title=self.config.list_title)

        metrics.record_run(
            list_title=self.config.list_title,
            status=result.status,
            row_count=result.row_count if result.file_url else 0,
            duration_seconds=time.monotonic() - started,
            uploaded_bytes=result.size_bytes,
        )
        self.last_result = result
        return result
