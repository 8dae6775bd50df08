"""
Interface of the remote list and document store used by the exporter.

The host supplies an implementation bound to a site and an authenticated
session. SharePointRestClient talks to the SharePoint REST API; tests plug
in an in-memory implementation.
"""

from abc import ABC, abstractmethod
from typing import Any


class SharePointContext(ABC):
    """
    Remote capabilities needed for one export: a paged list query and a file upload.
    """

    @abstractmethod
    async def render_list_data_as_stream(
        self,
        list_title: str,
        view_xml: str,
        paging: str | None = None,
    ) -> dict[str, Any]:
        """
        Run a CAML view against a list and return one page of results.

        Args:
            list_title: Title of the list
            view_xml: CAML <View> document
            paging: Paging token from the previous page's NextHref (None for the first page)

        Returns:
            Response body with "Row" (list of row dicts) and, when more pages
            exist, "NextHref"
        """

    @abstractmethod
    async def add_file(
        self,
        folder_url: str,
        file_name: str,
        content: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> dict[str, Any]:
        """
        Create (or overwrite) a file in a folder.

        Args:
            folder_url: Server-relative folder path
            file_name: File name inside the folder
            content: File bytes
            content_type: MIME type of the content
            overwrite: Replace an existing file of the same name

        Returns:
            File metadata reported by the server (at least "ServerRelativeUrl" when available)
        """

    async def close(self) -> None:
        """Release resources held by the context."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
