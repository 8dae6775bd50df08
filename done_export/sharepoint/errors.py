"""
SharePoint client exceptions.
"""

from done_export.core.errors import ExportError


class SharePointError(ExportError):
    """Base exception for failed SharePoint requests."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class AuthenticationError(SharePointError):
    """Raised when the access token is missing, expired or rejected (401)."""


class AuthorizationError(SharePointError):
    """Raised when the caller may not read the list or write the folder (403)."""


class NotFoundError(SharePointError):
    """Raised when the list, folder or a referenced field does not exist (404)."""


class ThrottledError(SharePointError):
    """Raised when SharePoint throttles the request (429/503 with Retry-After)."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(SharePointError):
    """Raised when SharePoint returns a 5xx error."""
