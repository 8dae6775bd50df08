"""
ExportResult model representing the terminal state of one export run (ephemeral).
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExportResult(BaseModel):
    """
    Outcome of one export run.

    Attributes:
        status: "completed" (file written), "no_rows" (nothing matched, no upload)
            or "failed" (no file written by this run)
        list_title: Source list of the run
        row_count: Rows written to the CSV file
        file_name: Name of the written file
        file_url: Server-relative URL of the written file
        size_bytes: Size of the uploaded file in bytes
        message: Failure message for failed runs
        started_at: When the run started (UTC)
        finished_at: When the run ended (UTC)
    """

    status: Literal["completed", "no_rows", "failed"]
    list_title: str
    row_count: int = Field(0, ge=0)
    file_name: str | None = None
    file_url: str | None = None
    size_bytes: int = Field(0, ge=0)
    message: str | None = None
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @model_validator(mode="after")
    def check_status_consistency(self):
        """Only completed runs carry rows and a file; only failed runs carry a message."""
        if self.status != "completed" and (self.row_count or self.file_url):
            raise ValueError(f"status={self.status} cannot carry rows or a file")
        if self.status == "failed" and not self.message:
            raise ValueError("failed runs need a message")
        return self

    @property
    def succeeded(self) -> bool:
        return self.status != "failed"

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    class Config:
        json_schema_extra = {
            "example": {
                "status": "completed",
                "list_title": "UserStories",
                "row_count": 42,
                "file_name": "UserStories_Archive_2025-11-17.csv",
                "file_url": "/sites/Agile/Shared Documents/Exports/UserStories_Archive_2025-11-17.csv"
            }
        }
