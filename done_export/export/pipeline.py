"""
Export pipeline orchestration.

Coordinates the flow: build query → fetch & normalize → encode CSV → upload
"""

from datetime import datetime
from pathlib import Path

from done_export.core.models import ExportConfig, ExportResult
from done_export.core.query import build_list_query
from done_export.core.timestamps import utcnow
from done_export.export.readers import ListItemReader
from done_export.export.run_log import RunLog
from done_export.export.writers import FilePublisher, build_file_name, file_url, to_csv
from done_export.observability.logger import get_logger, log_operation
from done_export.sharepoint.context import SharePointContext

logger = get_logger(__name__)


class ExportPipeline:
    """
    Runs one export from query to uploaded file.

    Flow:
    1. Build the CAML query from the configuration
    2. Fetch all matching rows (paged) and normalize them
    3. Stop with "no_rows" if nothing matched (no file is written)
    4. Encode the rows as CSV
    5. Upload the file to the target folder, replacing a same-day file

    Exceptions propagate to the caller; ExportRunner turns them into a
    failed run.
    """

    def __init__(self, context: SharePointContext, delimiter: str = ","):
        """
        Initialize export pipeline.

        Args:
            context: Remote list and document store access
            delimiter: CSV field delimiter
        """
        self.context = context
        self.delimiter = delimiter
        self.publisher = FilePublisher(context)

    async def execute(
        self,
        config: ExportConfig,
        log: RunLog,
        now: datetime | None = None,
        dry_run: bool = False,
        output_path: str | Path | None = None,
    ) -> ExportResult:
        """
        Run the export once.

        Args:
            config: Export configuration
            log: Run log receiving progress lines
            now: Reference time for threshold, timestamps and file name (defaults to now)
            dry_run: Fetch and encode, but do not upload
            output_path: Also write the CSV to this local file

        Returns:
            ExportResult with status "completed" or "no_rows"
        """
        started_at = now or utcnow()
        reader = ListItemReader(self.context, exported_on_field=config.exported_on_field)

        log.append(f"Reading from list: {config.list_title}…")

        # Step 1: Build query
        query = build_list_query(config, now=started_at)

        # Step 2: Fetch and normalize
        with log_operation("Fetching list items", logger=logger, list_title=config.list_title):
            rows = await reader.fetch_rows(query, exported_on=started_at)

        log.append(f"Items found: {len(rows)}")

        # Step 3: Nothing matched
        if not rows:
            log.append("Nothing to export.")
            return ExportResult(
                status="no_rows",
                list_title=config.list_title,
                started_at=started_at,
                finished_at=utcnow(),
            )

        # Step 4: Encode
        with log_operation("Encoding CSV", logger=logger, row_count=len(rows)):
            text = to_csv(rows, delimiter=self.delimiter)

        if output_path is not None:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8", newline="")
            log.append(f"Saved local copy: {path}")

        file_name = build_file_name(config.file_prefix, started_at)
        target_url = file_url(config.target_folder_url, file_name)

        # Step 5: Upload
        if dry_run:
            log.append(f"Dry run: skipping upload of {target_url}")
            published_url = None
            size_bytes = 0
        else:
            log.append(f"Writing file to: {target_url}")
            with log_operation("Uploading CSV", logger=logger, file_name=file_name):
                published = await self.publisher.publish(
                    text, config.target_folder_url, config.file_prefix, now=started_at
                )
            published_url = published.server_relative_url
            size_bytes = published.size_bytes

        log.append(f"Export completed ({len(rows)} rows)")

        return ExportResult(
            status="completed",
            list_title=config.list_title,
            row_count=len(rows),
            file_name=file_name,
            file_url=published_url,
            size_bytes=size_bytes,
            started_at=started_at,
            finished_at=utcnow(),
        )
