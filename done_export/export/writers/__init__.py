"""
CSV encoding and file publishing.
"""

from .csv_encoder import encode_line, format_value, to_csv
from .file_publisher import CSV_CONTENT_TYPE, FilePublisher, PublishedFile, build_file_name, file_url

__all__ = [
    "CSV_CONTENT_TYPE",
    "FilePublisher",
    "PublishedFile",
    "build_file_name",
    "file_url",
    "encode_line",
    "format_value",
    "to_csv",
]
