"""
Export pipeline: read list items, encode CSV, publish the file.
"""

from .pipeline import ExportPipeline
from .readers import ListItemReader
from .run_log import RunLog
from .runner import ExportRunner
from .writers import FilePublisher, to_csv

__all__ = [
    "ExportPipeline",
    "ExportRunner",
    "FilePublisher",
    "ListItemReader",
    "RunLog",
    "to_csv",
]
