"""
Error records exchanged between the schema validator, the translator and
the message renderer.

RawValidationFailure is what the validator adapter produces; NormalizedError
is what the translator and the file checks hand back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DependencyParseError(ValueError):
    """The dependency diagnostic no longer has the expected shape."""


class SchemaNotFoundError(LookupError):
    """A schema reference could not be resolved to a document or sub-schema."""


class ErrorType(str, Enum):
    MISSING = "missing"
    TYPE = "type"
    FORMAT = "format"
    ENUM = "enum"
    DEPENDENCIES = "dependencies"
    ANY_OF = "anyOf"
    REQUIRED_FILE_MISSING = "requiredFileMissing"
    INVALID_EXTENSION = "invalidExtension"
    INVALID_MIME = "invalidMime"
    INVALID_SIZE_SMALL = "invalidSizeSmall"
    INVALID_SIZE_LARGE = "invalidSizeLarge"


FILE_ERROR_TYPES = frozenset(
    {
        ErrorType.REQUIRED_FILE_MISSING,
        ErrorType.INVALID_EXTENSION,
        ErrorType.INVALID_MIME,
        ErrorType.INVALID_SIZE_SMALL,
        ErrorType.INVALID_SIZE_LARGE,
    }
)


@dataclass
class RawValidationFailure:
    """One failure reported by the schema validator."""

    property: str
    name: str
    argument: Any = None
    message: str = ""
    schema: dict[str, Any] = field(default_factory=dict)
    stack: str = ""
    # Set by the adapter for dependency failures so the stack text
    # does not have to be parsed.
    dependency: str | None = None


@dataclass
class NormalizedError:
    """A validation problem in the shape the message renderer understands."""

    field: str | None
    error_type: ErrorType
    expected_field_type: str | float | list[str] | None = None
    enum_message: str | None = None
    dependency: str | None = None
    any_of_fields: list[str] | None = None
    message: str | None = None

    _KEYS = {
        "field": "field",
        "error_type": "errorType",
        "expected_field_type": "expectedFieldType",
        "enum_message": "enumMessage",
        "dependency": "dependency",
        "any_of_fields": "anyOfFields",
        "message": "message",
    }

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, leaving out fields that are not set."""
        output: dict[str, Any] = {}
        for attr, key in self._KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            output[key] = value.value if isinstance(value, ErrorType) else value
        return output
