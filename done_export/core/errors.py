"""
Exception hierarchy for the export pipeline.

Remote failures live in done_export.sharepoint.errors; both trees are
caught together at the run boundary (ExportRunner.trigger).
"""


class ExportError(Exception):
    """Base exception for export pipeline failures."""


class ConfigurationError(ExportError):
    """Raised when an export configuration cannot be loaded or is invalid."""


class HeterogeneousRowsError(ExportError):
    """Raised by strict CSV encoding when a row's fields differ from the header."""

    def __init__(self, row_index: int, missing: list[str], unexpected: list[str]):
        self.row_index = row_index
        self.missing = missing
        self.unexpected = unexpected
        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if unexpected:
            parts.append(f"unexpected {', '.join(unexpected)}")
        super().__init__(f"Row {row_index} does not match header fields: {'; '.join(parts)}")
