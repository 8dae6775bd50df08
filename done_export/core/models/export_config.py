"""
ExportConfig model holding the user-supplied parameters of one export.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from done_export.utils.validation import (
    ValidationError,
    parse_field_list,
    validate_field_name,
    validate_file_prefix,
    validate_limit,
    validate_server_relative_url,
)

DEFAULT_FILE_PREFIX = "Kanban_Archive"
DEFAULT_OLDER_THAN_DAYS = 30
DEFAULT_PAGE_SIZE = 500
DEFAULT_EXPORTED_ON_FIELD = "ExportedOnUtc"


class ExportConfig(BaseModel):
    """
    Parameters of an export, read-only for the duration of a run.

    Field names are SharePoint internal names. Whether the fields exist on
    the list is not checked here; the server reports that when the query runs.

    Attributes:
        list_title: Title of the source list
        status_field: Internal name of the status field
        done_value: Status value identifying a completed item
        done_date_field: Internal name of the completion date field
        select_fields: Fields exported as CSV columns, in column order
        older_than_days: Items completed at or before now minus this many days are exported
        target_folder_url: Server-relative path of the destination folder
        file_prefix: File name prefix, the file is named {prefix}_{YYYY-MM-DD}.csv
        page_size: Row limit per page of the paged list query
        exported_on_field: Name of the column holding the export timestamp
    """

    list_title: str = Field(..., min_length=1, max_length=255,
                            validation_alias=AliasChoices("list_title", "listTitle"))
    status_field: str = Field(..., validation_alias=AliasChoices("status_field", "statusField"))
    done_value: str = Field(..., validation_alias=AliasChoices("done_value", "doneValue"))
    done_date_field: str = Field(..., validation_alias=AliasChoices("done_date_field", "doneDateField"))
    select_fields: list[str] = Field(..., validation_alias=AliasChoices("select_fields", "selectFields"))
    older_than_days: int = Field(DEFAULT_OLDER_THAN_DAYS, ge=0,
                                 validation_alias=AliasChoices("older_than_days", "olderThanDays"))
    target_folder_url: str = Field(..., validation_alias=AliasChoices(
        "target_folder_url", "targetLibraryServerRelUrl"))
    file_prefix: str = Field(DEFAULT_FILE_PREFIX, validation_alias=AliasChoices("file_prefix", "filePrefix"))
    page_size: int = Field(DEFAULT_PAGE_SIZE, validation_alias=AliasChoices("page_size", "pageSize"))
    exported_on_field: str = Field(DEFAULT_EXPORTED_ON_FIELD,
                                   validation_alias=AliasChoices("exported_on_field", "exportedOnField"))

    @field_validator("list_title")
    @classmethod
    def strip_list_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("list_title cannot be empty or whitespace-only")
        return v

    @field_validator("status_field", "done_date_field", "exported_on_field")
    @classmethod
    def check_field_name(cls, v: str, info) -> str:
        return validate_field_name(v, info.field_name)

    @field_validator("select_fields", mode="before")
    @classmethod
    def split_select_fields(cls, v: Any) -> list[str]:
        return parse_field_list(v, "select_fields")

    @field_validator("target_folder_url")
    @classmethod
    def check_target_folder(cls, v: str) -> str:
        return validate_server_relative_url(v, "target_folder_url")

    @field_validator("file_prefix", mode="before")
    @classmethod
    def default_file_prefix(cls, v: Any) -> str:
        # An empty prefix falls back to the default, like an unset one
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_FILE_PREFIX
        return validate_file_prefix(v, "file_prefix")

    @field_validator("page_size")
    @classmethod
    def check_page_size(cls, v: int) -> int:
        return validate_limit(v, "page_size", max_limit=5000)

    @model_validator(mode="after")
    def check_exported_on_not_selected(self):
        if self.exported_on_field in self.select_fields:
            raise ValidationError(
                f"exported_on_field '{self.exported_on_field}' collides with a selected field"
            )
        return self

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "list_title": "UserStories",
                "status_field": "Status",
                "done_value": "Erledigt",
                "done_date_field": "DoneDate",
                "select_fields": ["ID", "Title", "Status", "DoneDate", "Assignee"],
                "older_than_days": 30,
                "target_folder_url": "/sites/Agile/Shared Documents/Exports",
                "file_prefix": "UserStories_Archive"
            }
        }
