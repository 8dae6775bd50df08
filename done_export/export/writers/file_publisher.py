"""
File publisher: uploads encoded CSV text to a document library folder.
"""

from dataclasses import dataclass
from datetime import datetime

from done_export.core.models.export_config import DEFAULT_FILE_PREFIX
from done_export.core.timestamps import file_date
from done_export.observability.logger import get_logger
from done_export.sharepoint.context import SharePointContext

logger = get_logger(__name__)

CSV_CONTENT_TYPE = "text/csv; charset=utf-8"


def build_file_name(prefix: str | None, now: datetime | None = None) -> str:
    """
    Name of the export file for a given day: {prefix}_{YYYY-MM-DD}.csv (UTC date).

    Examples:
        >>> build_file_name("UserStories_Archive", datetime(2025, 11, 17, 8, 30))
        'UserStories_Archive_2025-11-17.csv'
    """
    return f"{prefix or DEFAULT_FILE_PREFIX}_{file_date(now)}.csv"


def file_url(folder_url: str, file_name: str) -> str:
    """Server-relative URL of a file in a folder ("/" folders do not double the slash)."""
    return f"{folder_url.rstrip('/')}/{file_name}"


@dataclass(frozen=True)
class PublishedFile:
    """A file written to the document library."""

    file_name: str
    server_relative_url: str
    size_bytes: int


class FilePublisher:
    """
    Writes export files to a folder. Files of the same day share a name,
    so a later run on the same day replaces the earlier file.
    """

    def __init__(self, context: SharePointContext):
        """
        Initialize file publisher.

        Args:
            context: Remote document store access
        """
        self.context = context

    async def publish(
        self,
        text: str,
        folder_url: str,
        prefix: str | None = None,
        now: datetime | None = None,
    ) -> PublishedFile:
        """
        Upload CSV text as a UTF-8 file, overwriting a same-named file.

        Args:
            text: Encoded CSV document
            folder_url: Server-relative destination folder
            prefix: File name prefix
            now: Reference time for the file date (defaults to now)

        Returns:
            PublishedFile describing the written file

        Raises:
            SharePointError: If the upload fails
        """
        file_name = build_file_name(prefix, now)
        content = text.encode("utf-8")

        metadata = await self.context.add_file(
            folder_url,
            file_name,
            content,
            content_type=CSV_CONTENT_TYPE,
            overwrite=True,
        )

        server_relative_url = metadata.get("ServerRelativeUrl") or file_url(folder_url, file_name)
        logger.info(
            f"Uploaded {file_name}",
            extra={"file_url": server_relative_url, "size_bytes": len(content)},
        )

        return PublishedFile(
            file_name=file_name,
            server_relative_url=server_relative_url,
            size_bytes=len(content),
        )
