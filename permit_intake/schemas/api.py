"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Validation results
# ---------------------------------------------------------------------------

class ErrorRecord(BaseModel):
    """One validation problem, serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    field: str | None = None
    error_type: str
    expected_field_type: int | float | str | list[str] | None = None
    enum_message: str | None = None
    dependency: str | None = None
    any_of_fields: list[str] | None = None
    message: str | None = None


class ValidationReport(BaseModel):
    errors: list[ErrorRecord] = []
    message: str = ""


class FileSlot(BaseModel):
    """An upload field declared by an application schema."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    field: str
    filetypecode: str | None = None
    valid_extensions: list[str]
    max_size: float | None = None
    required_file: bool


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    routes: list[str] = []
