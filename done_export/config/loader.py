"""
Export configuration management.

Loads export and site settings from YAML files, applies environment
fallbacks and command-line overrides, and builds the validated models.

Precedence (lowest first): built-in defaults, YAML file, environment
(site settings only), explicit overrides.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from done_export.core.errors import ConfigurationError
from done_export.core.models import ExportConfig, SiteConnection

# Settings used when neither the file nor an override provides a value
DEFAULT_EXPORT_SETTINGS: dict[str, Any] = {
    "list_title": "UserStories",
    "status_field": "Status",
    "done_value": "Erledigt",
    "done_date_field": "DoneDate",
    "select_fields": "ID,Title,Status,DoneDate,Assignee,StoryPoints,Sprint,Priority,Labels,Created,Modified",
    "older_than_days": 30,
    "target_folder_url": "/Shared Documents/Exports",
    "file_prefix": "UserStories_Archive",
}

# Web part property names accepted in configuration files
EXPORT_KEY_ALIASES = {
    "listTitle": "list_title",
    "statusField": "status_field",
    "doneValue": "done_value",
    "doneDateField": "done_date_field",
    "selectFields": "select_fields",
    "olderThanDays": "older_than_days",
    "targetLibraryServerRelUrl": "target_folder_url",
    "targetFolderUrl": "target_folder_url",
    "filePrefix": "file_prefix",
    "pageSize": "page_size",
    "exportedOnField": "exported_on_field",
}

SITE_KEY_ALIASES = {
    "siteUrl": "site_url",
    "accessToken": "access_token",
    "timeoutSeconds": "timeout_seconds",
    "timeout": "timeout_seconds",
    "verifySsl": "verify_ssl",
}

SITE_ENV_VARS = {
    "site_url": "SHAREPOINT_SITE_URL",
    "access_token": "SHAREPOINT_ACCESS_TOKEN",
    "timeout_seconds": "SHAREPOINT_TIMEOUT",
    "verify_ssl": "SHAREPOINT_VERIFY_SSL",
}


def _canonical_keys(section: dict[str, Any], aliases: dict[str, str], section_name: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in section.items():
        canonical = aliases.get(key, key)
        if canonical in result:
            raise ConfigurationError(f"Setting '{canonical}' given twice in '{section_name}' section")
        result[canonical] = value
    return result


def _format_validation_error(error: PydanticValidationError, model_name: str) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or model_name
        problems.append(f"{location}: {item['msg']}")
    return f"Invalid {model_name} configuration: " + "; ".join(problems)


class ExportConfigLoader:
    """
    Loads export settings from a YAML configuration file.

    Expected YAML format:
    ```yaml
    site:
      site_url: https://contoso.sharepoint.com/sites/Agile
      timeout_seconds: 30

    export:
      list_title: UserStories
      status_field: Status
      done_value: Erledigt
      done_date_field: DoneDate
      select_fields: ID,Title,Status,DoneDate,Assignee
      older_than_days: 30
      target_folder_url: /sites/Agile/Shared Documents/Exports
      file_prefix: UserStories_Archive
    ```

    Web part property names (listTitle, targetLibraryServerRelUrl, ...) are
    accepted as well. Access tokens belong in the environment
    (SHAREPOINT_ACCESS_TOKEN), not in the file.
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            ConfigurationError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

    def load_settings(self) -> dict[str, dict[str, Any]]:
        """
        Load and parse the configuration file.

        Returns:
            {"export": {...}, "site": {...}} with canonical snake_case keys

        Raises:
            ConfigurationError: If the YAML is invalid or has the wrong shape
        """
        try:
            with open(self.config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        unknown = set(config) - {"export", "site"}
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        export_section = config.get("export") or {}
        site_section = config.get("site") or {}
        for name, section in (("export", export_section), ("site", site_section)):
            if not isinstance(section, dict):
                raise ConfigurationError(f"'{name}' section must be a mapping")

        return {
            "export": _canonical_keys(export_section, EXPORT_KEY_ALIASES, "export"),
            "site": _canonical_keys(site_section, SITE_KEY_ALIASES, "site"),
        }


def build_export_config(
    settings: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
    use_defaults: bool = True,
) -> ExportConfig:
    """
    Build an ExportConfig from defaults, file settings and overrides.

    Override values of None are ignored, so unset CLI flags do not mask
    file settings.

    Raises:
        ConfigurationError: If the merged settings are invalid
    """
    merged: dict[str, Any] = dict(DEFAULT_EXPORT_SETTINGS) if use_defaults else {}
    merged.update(_canonical_keys(settings or {}, EXPORT_KEY_ALIASES, "export"))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return ExportConfig(**merged)
    except PydanticValidationError as e:
        raise ConfigurationError(_format_validation_error(e, "export")) from e


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Expected a boolean value, got '{value}'")


def build_site_connection(
    settings: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
) -> SiteConnection:
    """
    Build a SiteConnection from file settings, environment and overrides.

    Environment variables: SHAREPOINT_SITE_URL, SHAREPOINT_ACCESS_TOKEN,
    SHAREPOINT_TIMEOUT, SHAREPOINT_VERIFY_SSL.

    Raises:
        ConfigurationError: If no site URL is configured or a value is invalid
    """
    merged: dict[str, Any] = _canonical_keys(settings or {}, SITE_KEY_ALIASES, "site")

    for key, env_var in SITE_ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            merged[key] = _parse_bool(value) if key == "verify_ssl" else value

    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    if not merged.get("site_url"):
        raise ConfigurationError(
            "SharePoint site URL must be provided. "
            "Set SHAREPOINT_SITE_URL, add site.site_url to the config file or pass --site-url."
        )

    try:
        return SiteConnection(**merged)
    except PydanticValidationError as e:
        raise ConfigurationError(_format_validation_error(e, "site")) from e
