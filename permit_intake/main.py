"""
FastAPI application entrypoint.

Run locally:  uvicorn permit_intake.main:app --reload
"""

import logging

from fastapi import FastAPI

from permit_intake.api.routes import router
from permit_intake.config import settings

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")

app = FastAPI(
    title="Permit Application Intake API",
    description=(
        "Validates permit application submissions and their file uploads "
        "against JSON schemas, returning field-level errors and a readable summary."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")
