"""
SharePoint REST client built on httpx.

Implements SharePointContext against the SharePoint REST API:

- POST {site}/_api/web/lists/GetByTitle('{title}')/RenderListDataAsStream
- POST {site}/_api/web/GetFolderByServerRelativePath(decodedurl='{folder}')
       /Files/AddUsingPath(decodedurl='{name}',overwrite=true)

Requests are authenticated with a bearer token obtained by the caller.
Failed requests raise SharePointError subclasses; nothing is retried.
"""

from typing import Any
from urllib.parse import quote

import httpx

from done_export.core.models import SiteConnection
from done_export.observability.logger import get_logger
from done_export.sharepoint.context import SharePointContext
from done_export.sharepoint.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ServerError,
    SharePointError,
    ThrottledError,
)

logger = get_logger(__name__)

# RenderListDataAsStream option flag: ListData
RENDER_OPTIONS_LIST_DATA = 2

JSON_ACCEPT = "application/json;odata=nometadata"


def odata_literal(value: str) -> str:
    """
    Encode a value as an OData string literal for use inside a URL path.

    Single quotes are doubled, everything outside the unreserved set is
    percent-encoded.

    Examples:
        >>> odata_literal("Kim's List")
        "'Kim''s%20List'"
    """
    return "'" + quote(value.replace("'", "''"), safe="/'") + "'"


def extract_error_message(response: httpx.Response) -> tuple[str, str | None]:
    """
    Pull a readable message and error code out of a SharePoint error response.

    Handles both the "odata.error" (nometadata) and "error" (verbose/Graph) shapes.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}", None

    if not isinstance(body, dict):
        return f"HTTP {response.status_code}", None

    error = body.get("odata.error") or body.get("error") or {}
    if not isinstance(error, dict):
        return str(error), None

    message = error.get("message")
    if isinstance(message, dict):
        message = message.get("value")
    code = error.get("code")

    return message or f"HTTP {response.status_code}", code


class SharePointRestClient(SharePointContext):
    """
    SharePointContext implementation talking to a live SharePoint web.

    Usage:
        async with SharePointRestClient(connection) as sp:
            page = await sp.render_list_data_as_stream("UserStories", view_xml)
    """

    def __init__(
        self,
        connection: SiteConnection,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            connection: Site URL, token and HTTP settings
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.connection = connection

        headers = {"Accept": JSON_ACCEPT}
        if connection.access_token is not None:
            headers["Authorization"] = f"Bearer {connection.access_token.get_secret_value()}"

        self._client = httpx.AsyncClient(
            base_url=connection.site_url + "/_api/",
            headers=headers,
            timeout=connection.timeout_seconds,
            verify=connection.verify_ssl,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def render_list_data_as_stream(
        self,
        list_title: str,
        view_xml: str,
        paging: str | None = None,
    ) -> dict[str, Any]:
        parameters: dict[str, Any] = {
            "ViewXml": view_xml,
            "RenderOptions": RENDER_OPTIONS_LIST_DATA,
        }
        if paging:
            parameters["Paging"] = paging.lstrip("?")

        path = f"web/lists/GetByTitle({odata_literal(list_title)})/RenderListDataAsStream"
        response = await self._request(
            "POST",
            path,
            json={"parameters": parameters},
            headers={"Content-Type": "application/json;odata=nometadata"},
        )
        return response.json()

    async def add_file(
        self,
        folder_url: str,
        file_name: str,
        content: bytes,
        content_type: str,
        overwrite: bool = True,
    ) -> dict[str, Any]:
        path = (
            f"web/GetFolderByServerRelativePath(decodedurl={odata_literal(folder_url)})"
            f"/Files/AddUsingPath(decodedurl={odata_literal(file_name)},"
            f"overwrite={'true' if overwrite else 'false'})"
        )
        response = await self._request(
            "POST",
            path,
            content=content,
            headers={"Content-Type": content_type},
        )
        if not response.content:
            return {}
        return response.json()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise SharePointError(f"Request to SharePoint failed: {e}") from e

        logger.debug(
            "SharePoint request",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map HTTP error responses to SharePointError subclasses."""
        status = response.status_code
        if status < 400:
            return

        message, code = extract_error_message(response)
        retry_after = response.headers.get("Retry-After")

        if status == 401:
            raise AuthenticationError(message, status_code=status, code=code)
        elif status == 403:
            raise AuthorizationError(message, status_code=status, code=code)
        elif status == 404:
            raise NotFoundError(message, status_code=status, code=code)
        elif status == 429 or (status == 503 and retry_after):
            raise ThrottledError(
                message,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                status_code=status,
                code=code,
            )
        elif status >= 500:
            raise ServerError(message, status_code=status, code=code)
        else:
            raise SharePointError(message, status_code=status, code=code)
