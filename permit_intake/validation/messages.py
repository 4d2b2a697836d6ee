"""
Human-readable messages for NormalizedError records.

Field paths are shown as slash-separated title-cased segments
(``applicant.zipCode`` -> ``Applicant/Zip Code``). Format and pattern
failures take their wording from a static table keyed by field name.
"""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

from permit_intake.config import settings
from permit_intake.validation.errors import ErrorType, NormalizedError

logger = logging.getLogger(__name__)

DEFAULT_FORMAT_SUFFIX = " is not in a valid format."

# Subject used for failures on the document itself.
ROOT_LABEL = "Application"


def load_pattern_messages(path: Path | None = None) -> dict[str, str]:
    """Load the field-name -> message-suffix table for format errors."""
    return _read_pattern_messages(Path(path or settings.PATTERN_MESSAGES_FILE))


@lru_cache(maxsize=None)
def _read_pattern_messages(path: Path) -> dict[str, str]:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def make_field_readable(field: str) -> str:
    readable = re.sub(r"([A-Z])", r" \1", field)
    readable = readable[:1].upper() + readable[1:]
    return readable.replace("Z I P", "Zip", 1).replace("U R L", "URL", 1)


def make_path_readable(path: Any) -> str | bool:
    if not isinstance(path, str):
        return False
    if not path:
        return ROOT_LABEL
    return "/".join(make_field_readable(part) for part in path.split("."))


def build_format_error_message(
    full_path: str,
    pattern_messages: Mapping[str, str] | None = None,
) -> str:
    if pattern_messages is None:
        pattern_messages = load_pattern_messages()
    field = full_path.rsplit(".", 1)[-1]
    suffix = pattern_messages.get(field)
    if suffix is None:
        logger.debug("No format message for field '%s'", field)
        suffix = DEFAULT_FORMAT_SUFFIX
    return f"{make_path_readable(full_path)}{suffix}"


def make_any_of_message(any_of_fields: Sequence[str] | None) -> str | bool:
    if not any_of_fields:
        return False
    return " or ".join(make_path_readable(field) for field in any_of_fields)


def concat_errors(messages: Sequence[str]) -> str:
    return " ".join(messages).strip()


def _format_size(size: Any) -> str:
    if isinstance(size, float) and size.is_integer():
        return str(int(size))
    return str(size)


def generate_file_error_message(error: NormalizedError) -> str | None:
    """Render a file-upload error; returns None for types that are not file errors."""
    field = make_path_readable(error.field)
    allowed = error.expected_field_type
    if isinstance(allowed, (list, tuple)):
        allowed = ", ".join(allowed)

    if error.error_type is ErrorType.REQUIRED_FILE_MISSING:
        return f"{field} is a required file."
    if error.error_type is ErrorType.INVALID_EXTENSION:
        return f"{field} must be one of the following extensions: {allowed}."
    if error.error_type is ErrorType.INVALID_MIME:
        return f"{field} must be one of the following mime types: {allowed}."
    if error.error_type is ErrorType.INVALID_SIZE_SMALL:
        return f"{field} cannot be an empty file."
    if error.error_type is ErrorType.INVALID_SIZE_LARGE:
        return f"{field} cannot be larger than {_format_size(error.expected_field_type)} MB."
    return None


def render_error(
    error: NormalizedError,
    pattern_messages: Mapping[str, str] | None = None,
) -> str | None:
    field = make_path_readable(error.field)

    if error.error_type is ErrorType.MISSING:
        return f"{field} is a required field."
    if error.error_type is ErrorType.TYPE:
        return f"{field} is expected to be type '{error.expected_field_type}'."
    if error.error_type is ErrorType.FORMAT:
        return build_format_error_message(error.field, pattern_messages)
    if error.error_type is ErrorType.ENUM:
        return f"{field} {error.enum_message}."
    if error.error_type is ErrorType.DEPENDENCIES:
        return f"Having {field} requires that {make_path_readable(error.dependency)} be provided."
    if error.error_type is ErrorType.ANY_OF:
        return f"Either {make_any_of_message(error.any_of_fields)} is a required field."
    return generate_file_error_message(error)


def generate_error_message(
    errors: Sequence[NormalizedError],
    pattern_messages: Mapping[str, str] | None = None,
) -> str:
    """
    Set ``message`` on every error and return all messages joined by spaces.
    """
    messages = []
    for error in errors:
        message = render_error(error, pattern_messages)
        if message is None:
            logger.warning("No message template for error type '%s'", error.error_type)
            continue
        error.message = message
        messages.append(message)
    return concat_errors(messages)
