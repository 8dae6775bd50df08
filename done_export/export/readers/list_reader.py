"""
List item reader: runs a list query and collects every page of results.
"""

from datetime import datetime
from typing import Any

from done_export.core.models import ListQuery
from done_export.core.timestamps import utcnow
from done_export.observability.logger import get_logger
from done_export.sharepoint.context import SharePointContext

from .normalizer import normalize_rows

logger = get_logger(__name__)

# Upper bound on pages followed for one query
MAX_PAGES = 10_000


class ListItemReader:
    """
    Reads the rows matching a ListQuery from a list.
    """

    def __init__(self, context: SharePointContext, exported_on_field: str = "ExportedOnUtc"):
        """
        Initialize list item reader.

        Args:
            context: Remote list access
            exported_on_field: Column name for the export timestamp
        """
        self.context = context
        self.exported_on_field = exported_on_field

    async def read(self, query: ListQuery) -> list[dict[str, Any]]:
        """
        Execute the query and return raw rows in server order.

        Follows the NextHref paging token until the server reports no further page.

        Args:
            query: List query to execute

        Returns:
            Raw rows (field values plus server metadata fields)

        Raises:
            SharePointError: If a page request fails
            RuntimeError: If the server keeps returning the same paging token
        """
        rows: list[dict[str, Any]] = []
        paging: str | None = None
        seen_tokens: set[str] = set()

        for page_number in range(1, MAX_PAGES + 1):
            page = await self.context.render_list_data_as_stream(
                query.list_title, query.view_xml, paging=paging
            )
            page_rows = page.get("Row") or []
            rows.extend(page_rows)

            logger.debug(
                f"Fetched page {page_number} of {query.list_title}",
                extra={"list_title": query.list_title, "page": page_number, "page_rows": len(page_rows)},
            )

            paging = page.get("NextHref")
            if not paging:
                return rows
            if paging in seen_tokens:
                raise RuntimeError(f"Paging of list '{query.list_title}' did not advance ({paging})")
            seen_tokens.add(paging)

        raise RuntimeError(f"List '{query.list_title}' returned more than {MAX_PAGES} pages")

    async def fetch_rows(
        self,
        query: ListQuery,
        exported_on: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """
        Execute the query and return normalized record rows.

        No matching items is a valid outcome and yields an empty list.

        Args:
            query: List query to execute
            exported_on: Export timestamp stamped on every row (defaults to now)

        Returns:
            Record rows restricted to the query's view fields, plus the export timestamp
        """
        raw_rows = await self.read(query)
        return normalize_rows(
            raw_rows,
            query.view_fields,
            exported_on or utcnow(),
            self.exported_on_field,
        )
