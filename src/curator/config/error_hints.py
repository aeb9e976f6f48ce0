"""Operator-facing hints for configuration validation errors."""

from typing import Final


ERROR_HINTS: Final[dict[str, str]] = {
    "missing": "This field is required. Add it to the file.",
    "enum": "Use one of the allowed values listed in the error message.",
    "int_type": "This field must be a whole number.",
    "float_type": "This field must be a number.",
    "string_type": "This field must be a text string.",
    "bool_type": "This field must be true or false.",
    "list_type": "This field must be a list.",
    "dict_type": "This field must be a mapping.",
    "greater_than_equal": "The value is below the allowed minimum.",
    "less_than_equal": "The value is above the allowed maximum.",
    "string_too_short": "The text is empty or too short.",
    "string_pattern_mismatch": "Use letters, digits, hyphens or underscores only.",
    "value_error": "The value breaks a cross-field rule; read the message above.",
    "extra_forbidden": "Unknown key. Check for typos in the field name.",
    "file_not_found": "The file does not exist. Check the path or CURATOR_* setting.",
    "yaml_parse_error": "Invalid YAML/JSON syntax. Check indentation and quoting.",
}

FIELD_HINTS: Final[dict[str, str]] = {
    "weights": "Subscore weights must be non-negative and sum to 1.0.",
    "order": "Rank every tier (free, premium, pro) with a distinct integer.",
    "scope_minimum": "Give a minimum tier for current_digest, all_digests, saved_items and folder.",
    "topic_policy": "Must be 'reject' or 'strip'.",
    "sourceType": "Must be one of: journal, reddit, substack, youtube, podcast.",
    "source_type": "Must be one of: journal, reddit, substack, youtube, podcast.",
    "topics": "Topics must be names from the taxonomy file.",
    "version": "Use a MAJOR.MINOR version string such as '1.0'.",
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Get a hint for a validation error.

    Field-specific hints win over error-type hints.

    Args:
        error_type: The Pydantic error type (e.g., 'missing', 'enum').
        field_name: Optional dotted field location.

    Returns:
        A hint string.
    """
    if field_name:
        simple_field = field_name.split(".")[-1]
        if simple_field in FIELD_HINTS:
            return FIELD_HINTS[simple_field]
    return ERROR_HINTS.get(error_type, "Check the configuration reference for valid values.")


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a validation error, optionally followed by a hint line."""
    base = f"{location}: {message}"
    if include_hint:
        return f"{base}\n    Hint: {get_error_hint(error_type, location)}"
    return base
