"""
Input validation utilities for values crossing process boundaries.

Batch ids arrive from the command line and from queue messages; they are
checked before being used in queries.
"""

import re

BATCH_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\.]+$")


class InputValidationError(ValueError):
    """Raised when input validation fails."""


def validate_batch_id(batch_id: str, field_name: str = "batch_id") -> str:
    """
    Validate a batch id.

    Batch ids must be non-empty strings containing only alphanumeric
    characters, hyphens, underscores and dots.

    Args:
        batch_id: The batch id to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated batch id (stripped of whitespace)

    Raises:
        InputValidationError: If validation fails

    Examples:
        >>> validate_batch_id("batch_1731801600000_k3j9x")
        'batch_1731801600000_k3j9x'
        >>> validate_batch_id("batch; DROP TABLE")  # doctest: +SKIP
        InputValidationError: batch_id contains invalid characters
    """
    if not batch_id or not isinstance(batch_id, str):
        raise InputValidationError(f"{field_name} must be a non-empty string")

    batch_id = batch_id.strip()

    if not batch_id:
        raise InputValidationError(f"{field_name} cannot be empty or whitespace-only")

    if not BATCH_ID_PATTERN.match(batch_id):
        raise InputValidationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )

    # Matches the ingest_batch.id column width
    if len(batch_id) > 128:
        raise InputValidationError(f"{field_name} exceeds maximum length of 128 characters")

    return batch_id


def validate_file_path(file_path: str, field_name: str = "file_path") -> str:
    """
    Validate an input file path.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        InputValidationError: If the path is empty, contains null bytes or
            wildcards, or is unreasonably long
    """
    if not file_path or not isinstance(file_path, str):
        raise InputValidationError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise InputValidationError(f"{field_name} cannot be empty or whitespace-only")

    if "\x00" in file_path:
        raise InputValidationError(f"{field_name} contains null bytes")

    if "*" in file_path or "?" in file_path:
        raise InputValidationError(f"{field_name} contains wildcards (* or ?)")

    if len(file_path) > 4096:  # Linux PATH_MAX
        raise InputValidationError(f"{field_name} exceeds maximum length of 4096 characters")

    return file_path
