"""
Access to the remote list and document library.
"""

from .context import SharePointContext
from .errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ServerError,
    SharePointError,
    ThrottledError,
)
from .rest_client import SharePointRestClient

__all__ = [
    "SharePointContext",
    "SharePointRestClient",
    "SharePointError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ThrottledError",
    "ServerError",
]
