"""
Input validation utilities for the export pipeline.

Provides reusable validation functions for the user-supplied parts of an
export configuration: list field names, server-relative folder paths,
file name prefixes and numeric limits. Field names end up inside the
generated CAML query and prefixes inside a file URL, so both are checked
before anything is sent to the server.
"""

import re


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


# SharePoint internal field names: letters, digits and underscores
# (encoded characters appear as _x0020_ and friends)
_FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Characters SharePoint rejects in file and folder names
_INVALID_PATH_CHARS = set('"*:<>?|#%')


def validate_field_name(field_name: str, setting: str = "field_name") -> str:
    """
    Validate a list field internal name.

    Args:
        field_name: The internal field name to validate
        setting: Name of the setting (for error messages)

    Returns:
        The validated field name (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_field_name("DoneDate")
        'DoneDate'
        >>> validate_field_name("Story_x0020_Points")
        'Story_x0020_Points'
        >>> validate_field_name("Done Date")  # doctest: +SKIP
        ValidationError: field_name 'Done Date' is not a valid internal field name
    """
    if not field_name or not isinstance(field_name, str):
        raise ValidationError(f"{setting} must be a non-empty string")

    field_name = field_name.strip()

    if not _FIELD_NAME_RE.match(field_name):
        raise ValidationError(
            f"{setting} '{field_name}' is not a valid internal field name. "
            "Only letters, digits and underscores are allowed."
        )

    if len(field_name) > 255:
        raise ValidationError(f"{setting} exceeds maximum length of 255 characters")

    return field_name


def parse_field_list(fields: str | list[str], setting: str = "select_fields") -> list[str]:
    """
    Parse and validate a field selection.

    Accepts either a comma-separated string or a list. Items are trimmed,
    empty items dropped and duplicates removed (first occurrence wins).

    Examples:
        >>> parse_field_list("ID, Title,,Status")
        ['ID', 'Title', 'Status']
    """
    if isinstance(fields, str):
        items = fields.split(",")
    elif isinstance(fields, (list, tuple)):
        items = list(fields)
    else:
        raise ValidationError(f"{setting} must be a comma-separated string or a list")

    parsed: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ValidationError(f"{setting} items must be strings, got {type(item).__name__}")
        item = item.strip()
        if not item:
            continue
        name = validate_field_name(item, setting)
        if name not in parsed:
            parsed.append(name)

    if not parsed:
        raise ValidationError(f"{setting} must name at least one field")

    return parsed


def validate_server_relative_url(url: str, setting: str = "target_folder_url") -> str:
    """
    Validate a server-relative folder path such as "/sites/Agile/Shared Documents/Exports".

    Trailing slashes are removed.

    Raises:
        ValidationError: If the path is not server-relative or contains
            characters SharePoint does not allow
    """
    if not url or not isinstance(url, str):
        raise ValidationError(f"{setting} must be a non-empty string")

    url = url.strip()

    if not url.startswith("/"):
        raise ValidationError(f"{setting} must be a server-relative path starting with '/'")

    if "://" in url:
        raise ValidationError(f"{setting} must not be an absolute URL")

    bad = sorted(set(url) & _INVALID_PATH_CHARS)
    if bad:
        raise ValidationError(f"{setting} contains invalid characters: {' '.join(bad)}")

    if "/../" in url + "/" or url.endswith("/.."):
        raise ValidationError(f"{setting} must not contain '..' segments")

    return url.rstrip("/") or "/"


def validate_file_prefix(prefix: str, setting: str = "file_prefix") -> str:
    """
    Validate a file name prefix.

    Raises:
        ValidationError: If the prefix contains path separators or characters
            SharePoint rejects in file names
    """
    if not isinstance(prefix, str):
        raise ValidationError(f"{setting} must be a string")

    prefix = prefix.strip()

    if not prefix:
        raise ValidationError(f"{setting} cannot be empty or whitespace-only")

    if "/" in prefix or "\\" in prefix:
        raise ValidationError(f"{setting} must not contain path separators")

    bad = sorted(set(prefix) & _INVALID_PATH_CHARS)
    if bad:
        raise ValidationError(f"{setting} contains invalid characters: {' '.join(bad)}")

    if prefix.startswith(".") or prefix.endswith("."):
        raise ValidationError(f"{setting} must not start or end with '.'")

    return prefix


def validate_limit(limit: int, setting: str = "limit", max_limit: int = 5000) -> int:
    """
    Validate a positive limit parameter (e.g. query page size).

    Examples:
        >>> validate_limit(100)
        100
        >>> validate_limit(0)  # doctest: +SKIP
        ValidationError: limit must be a positive integer
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"{setting} must be an integer, got {type(limit).__name__}")

    if limit <= 0:
        raise ValidationError(f"{setting} must be a positive integer, got {limit}")

    if limit > max_limit:
        raise ValidationError(f"{setting} exceeds maximum of {max_limit}")

    return limit
