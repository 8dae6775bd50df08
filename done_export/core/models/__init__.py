"""
Core data models for the export pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .export_config import ExportConfig
from .export_result import ExportResult
from .list_query import ListQuery
from .site_connection import SiteConnection

__all__ = [
    "ExportConfig",
    "ExportResult",
    "ListQuery",
    "SiteConnection",
]
