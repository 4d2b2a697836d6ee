"""Tests for uploaded-file validation."""

import pytest

from permit_intake.validation.errors import ErrorType
from permit_intake.validation.files import (
    FieldConstraints,
    UploadedFile,
    extension_allowed,
    get_file_info,
    validate_file,
)


def _constraints(**overrides):
    schema = {
        "type": "file",
        "filetypecode": "operating-plan",
        "validExtensions": ["pdf", "doc", "docx", "rtf"],
        "maxSize": 10,
        "requiredFile": True,
    }
    schema.update(overrides)
    return FieldConstraints.from_schema(schema)


def _upload(name="plan.pdf", size=2048, mimetype="application/pdf"):
    return UploadedFile(originalname=name, size=size, mimetype=mimetype, buffer=b"x" * min(size, 16))


def _types(errors):
    return [e.error_type for e in errors]


def test_valid_upload_has_no_errors():
    assert validate_file(_upload(), _constraints(), "operatingPlan") == []


def test_extension_is_case_insensitive():
    assert validate_file(_upload(name="PLAN.PDF"), _constraints(), "operatingPlan") == []


def test_invalid_extension_skips_mime_check():
    errors = validate_file(_upload(name="plan.exe", mimetype="application/x-msdownload"), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_EXTENSION]
    assert errors[0].expected_field_type == ["pdf", "doc", "docx", "rtf"]


def test_invalid_extension_with_valid_mime():
    errors = validate_file(_upload(name="plan.txt"), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_EXTENSION]


def test_invalid_mime():
    errors = validate_file(_upload(mimetype="image/png"), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_MIME]


@pytest.mark.parametrize("name", ["plan.pdf", "plan.exe", "plan"])
def test_empty_file_reports_only_size(name):
    errors = validate_file(_upload(name=name, size=0, mimetype="image/png"), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_SIZE_SMALL]


def test_file_too_large():
    errors = validate_file(_upload(size=10_000_001), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_SIZE_LARGE]
    assert errors[0].expected_field_type == 10


def test_file_at_size_limit_is_accepted():
    assert validate_file(_upload(size=10_000_000), _constraints(), "operatingPlan") == []


def test_bad_extension_and_too_large():
    errors = validate_file(_upload(name="plan.zip", size=20_000_000), _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.INVALID_EXTENSION, ErrorType.INVALID_SIZE_LARGE]


def test_missing_required_file():
    errors = validate_file(None, _constraints(), "operatingPlan")
    assert _types(errors) == [ErrorType.REQUIRED_FILE_MISSING]
    assert errors[0].field == "operatingPlan"


def test_missing_optional_file():
    assert validate_file(None, _constraints(requiredFile=False), "guideIdentification") == []


def test_extension_allowlist_is_anchored():
    assert extension_allowed("pdf", ["pdf"])
    assert not extension_allowed("pdfx", ["pdf"])
    assert not extension_allowed("xpdf", ["pdf"])
    assert not extension_allowed("", ["pdf"])
    assert not extension_allowed("pdf", [])


def test_get_file_info():
    info = get_file_info(_upload(name="Operating Plan.v2.pdf"), _constraints(), "operatingPlan", now_ms=1700000000000)
    assert info.ext == "pdf"
    assert info.filetypecode == "operating-plan"
    assert info.size == 2048
    assert info.mimetype == "application/pdf"
    assert info.filename == "operatingPlan-Operating Plan.v2-1700000000000.pdf"


def test_get_file_info_without_extension():
    info = get_file_info(_upload(name="plan"), _constraints(), "operatingPlan", now_ms=5)
    assert info.ext == ""
    assert info.filename == "operatingPlan-plan-5"


def test_missing_max_size_skips_size_limit():
    constraints = _constraints()
    constraints.max_size = None
    assert validate_file(_upload(size=50_000_000), constraints, "operatingPlan") == []
    schema = {"type": "file", "validExtensions": ["pdf"]}
    assert FieldConstraints.from_schema(schema).max_size is None
