"""
Configuration loading for export runs.
"""

from .loader import (
    DEFAULT_EXPORT_SETTINGS,
    ExportConfigLoader,
    build_export_config,
    build_site_connection,
)

__all__ = [
    "DEFAULT_EXPORT_SETTINGS",
    "ExportConfigLoader",
    "build_export_config",
    "build_site_connection",
]
