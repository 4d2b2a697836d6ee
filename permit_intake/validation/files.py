"""
Checks uploaded files against the constraints declared on ``type: file``
schema fields.

Constraint keys on a file field::

    {"type": "file", "filetypecode": "guide-document",
     "validExtensions": ["pdf", "doc", "docx", "rtf"],
     "maxSize": 10, "requiredFile": true}

``maxSize`` is in megabytes (1 MB = 1,000,000 bytes). Without it the size
limit is not checked. The MIME allowlist is shared by every file field.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Mapping

from permit_intake.validation.errors import ErrorType, NormalizedError

logger = logging.getLogger(__name__)

FILE_MIMES = [
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
    "text/rtf",
    "application/pdf",
]

BYTES_PER_MEGABYTE = 1_000_000.0


@dataclass
class FieldConstraints:
    filetypecode: str | None
    valid_extensions: list[str]
    max_size: float | None = None
    required_file: bool = False

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any]) -> FieldConstraints:
        return cls(
            filetypecode=schema.get("filetypecode"),
            valid_extensions=list(schema.get("validExtensions", [])),
            max_size=schema.get("maxSize"),
            required_file=bool(schema.get("requiredFile", False)),
        )


@dataclass
class UploadedFile:
    """A file as received from the multipart request."""

    originalname: str
    size: int
    mimetype: str | None
    buffer: bytes = b""
    encoding: str | None = None


@dataclass
class UploadedFileInfo:
    """Derived view of an upload, ready to hand to storage."""

    originalname: str
    field_name: str
    filetypecode: str | None
    ext: str
    size: int
    mimetype: str | None
    encoding: str | None
    buffer: bytes
    filename: str


def get_file_info(
    upload: UploadedFile,
    constraints: FieldConstraints,
    field_name: str,
    now_ms: int | None = None,
) -> UploadedFileInfo:
    """Describe ``upload`` and generate its storage name: ``<field>-<name>-<ms>.<ext>``."""
    original = PurePath(upload.originalname)
    ext = original.suffix[1:]
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    filename = f"{field_name}-{original.stem}-{now_ms}"
    if ext:
        filename = f"{filename}.{ext}"
    return UploadedFileInfo(
        originalname=upload.originalname,
        field_name=field_name,
        filetypecode=constraints.filetypecode,
        ext=ext,
        size=upload.size,
        mimetype=upload.mimetype,
        encoding=upload.encoding,
        buffer=upload.buffer,
        filename=filename,
    )


def extension_allowed(ext: str, valid_extensions: list[str]) -> bool:
    if not valid_extensions:
        return False
    pattern = "^(?:" + "|".join(re.escape(e) for e in valid_extensions) + ")$"
    return re.match(pattern, ext, re.IGNORECASE) is not None


def validate_file(
    upload: UploadedFile | None,
    constraints: FieldConstraints,
    field_name: str,
) -> list[NormalizedError]:
    """
    Check one upload slot.

    An empty file is reported as ``invalidSizeSmall`` and nothing else. For
    other uploads the extension is checked first; the MIME type is only
    checked when the extension passes. Size is checked independently.
    """
    errors: list[NormalizedError] = []

    if upload is None:
        if constraints.required_file:
            errors.append(NormalizedError(field_name, ErrorType.REQUIRED_FILE_MISSING))
        return errors

    info = get_file_info(upload, constraints, field_name)

    if info.size == 0:
        errors.append(NormalizedError(field_name, ErrorType.INVALID_SIZE_SMALL, expected_field_type=0))
        return errors

    if not extension_allowed(info.ext, constraints.valid_extensions):
        errors.append(
            NormalizedError(
                field_name,
                ErrorType.INVALID_EXTENSION,
                expected_field_type=constraints.valid_extensions,
            )
        )
    elif info.mimetype not in FILE_MIMES:
        errors.append(NormalizedError(field_name, ErrorType.INVALID_MIME, expected_field_type=list(FILE_MIMES)))

    if constraints.max_size is not None and info.size / BYTES_PER_MEGABYTE > constraints.max_size:
        errors.append(
            NormalizedError(
                field_name,
                ErrorType.INVALID_SIZE_LARGE,
                expected_field_type=constraints.max_size,
            )
        )

    if errors:
        logger.info("Upload '%s' for %s failed %d check(s)", info.originalname, field_name, len(errors))
    return errors
