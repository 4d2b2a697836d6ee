"""
FastAPI routes – the main API surface.

- Health check
- Listing the upload slots a permit application expects
- Validating a submission (JSON body plus file uploads) and returning
  structured errors with a readable summary
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from permit_intake.config import settings
from permit_intake.schemas.api import ErrorRecord, FileSlot, HealthResponse, ValidationReport
from permit_intake.schemas.permits import APPLICATION_ROUTES
from permit_intake.services.schema_repository import SchemaBundle, SchemaRepository
from permit_intake.services.validation import validate_application
from permit_intake.validation.errors import SchemaNotFoundError
from permit_intake.validation.files import FieldConstraints, UploadedFile
from permit_intake.validation.schema_tree import find_file_fields

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_schema_repository() -> SchemaRepository:
    """FastAPI dependency that returns the shared schema repository."""
    return SchemaRepository(settings.SCHEMA_DIR)


def _load_bundle(route_name: str, repository: SchemaRepository) -> SchemaBundle:
    ref = APPLICATION_ROUTES.get(route_name)
    if ref is None:
        raise HTTPException(status_code=404, detail=f"Unknown application route '{route_name}'")
    try:
        return repository.get_validation_schema(ref)
    except SchemaNotFoundError as exc:
        logger.error("Route '%s' has no usable schema: %s", route_name, exc)
        raise HTTPException(status_code=404, detail=str(exc)) from exc


async def _read_upload(upload: UploadFile) -> UploadedFile:
    buffer = await upload.read()
    return UploadedFile(
        originalname=upload.filename or "",
        size=len(buffer),
        mimetype=upload.content_type,
        buffer=buffer,
    )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        routes=sorted(APPLICATION_ROUTES),
    )


# ---------------------------------------------------------------------------
# Application validation
# ---------------------------------------------------------------------------

@router.get("/applications/{route_name}/files", response_model=list[FileSlot])
def list_file_slots(
    route_name: str,
    repository: SchemaRepository = Depends(get_schema_repository),
):
    """List the upload fields an application route expects."""
    bundle = _load_bundle(route_name, repository)
    slots = []
    for slot in find_file_fields(bundle.dereferenced):
        for field_name, field_schema in slot.items():
            constraints = FieldConstraints.from_schema(field_schema)
            slots.append(
                FileSlot(
                    field=field_name,
                    filetypecode=constraints.filetypecode,
                    valid_extensions=constraints.valid_extensions,
                    max_size=constraints.max_size,
                    required_file=constraints.required_file,
                )
            )
    return slots


@router.post("/applications/{route_name}/validate")
async def validate_submission(
    route_name: str,
    request: Request,
    repository: SchemaRepository = Depends(get_schema_repository),
):
    """
    Validate a multipart submission: a ``body`` field holding the JSON
    application and one file part per upload field.
    """
    bundle = _load_bundle(route_name, repository)
    form = await request.form()

    raw_body = form.get("body")
    if not isinstance(raw_body, str):
        raise HTTPException(status_code=400, detail="Form field 'body' with the application JSON is required")
    try:
        body = json.loads(raw_body)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Application body is not valid JSON: {exc.msg}") from exc

    uploads = {}
    for key, value in form.multi_items():
        # Unfilled file inputs arrive as parts with an empty filename.
        if isinstance(value, UploadFile) and value.filename and key not in uploads:
            uploads[key] = await _read_upload(value)

    errors, message = validate_application(body, uploads, bundle)
    report = ValidationReport(
        errors=[ErrorRecord.model_validate(error.to_dict()) for error in errors],
        message=message,
    )
    status_code = status.HTTP_400_BAD_REQUEST if errors else status.HTTP_200_OK
    if errors:
        logger.info("Rejected '%s' submission with %d error(s)", route_name, len(errors))
    return JSONResponse(
        status_code=status_code,
        content=report.model_dump(by_alias=True, exclude_none=True),
    )
