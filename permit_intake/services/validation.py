"""
JSON Schema validation service for permit applications.

- Runs Draft 4 validation with the permit-specific formats and the ``file`` type
- Adapts ``jsonschema`` errors to RawValidationFailure records
- Collects every error rather than failing on the first one
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from jsonschema import Draft4Validator, FormatChecker, ValidationError, validators

from permit_intake.services.schema_repository import SchemaBundle, dereference
from permit_intake.validation.errors import NormalizedError, RawValidationFailure
from permit_intake.validation.files import FieldConstraints, UploadedFile, validate_file
from permit_intake.validation.messages import generate_error_message
from permit_intake.validation.schema_tree import find_file_fields
from permit_intake.validation.translator import INSTANCE, process_errors

logger = logging.getLogger(__name__)


def _is_file(checker, instance) -> bool:
    # File contents travel as multipart parts, never in the JSON body.
    return True


PermitValidator = validators.extend(
    Draft4Validator,
    type_checker=Draft4Validator.TYPE_CHECKER.redefine("file", _is_file),
)

format_checker = FormatChecker()


def digit_check(instance: Any, num: int) -> bool:
    """Numbers must have exactly ``num`` digits; other types are not constrained."""
    if isinstance(instance, bool) or not isinstance(instance, (int, float)):
        return True
    if isinstance(instance, float) and instance.is_integer():
        instance = int(instance)
    return re.fullmatch(rf"[0-9]{{{num}}}", str(instance)) is not None


@format_checker.checks("areaCodeFormat")
def area_code_format(instance: Any) -> bool:
    return digit_check(instance, 3)


@format_checker.checks("phoneNumberFormat")
def phone_number_format(instance: Any) -> bool:
    return digit_check(instance, 7)


def format_path(path: Iterable[Any]) -> str:
    """``deque(['applicant', 'phones', 0])`` -> ``instance.applicant.phones[0]``"""
    output = INSTANCE
    for part in path:
        output += f"[{part}]" if isinstance(part, int) else f".{part}"
    return output


def _missing_property(error: ValidationError) -> str | None:
    for name in error.validator_value:
        if error.message.startswith(f"{name!r} "):
            return name
    return None


def _failed_dependency(error: ValidationError) -> tuple[str, str] | None:
    for prop, dependency in error.validator_value.items():
        if not isinstance(dependency, list):
            continue
        for each in dependency:
            if error.message == f"{each!r} is a dependency of {prop!r}":
                return prop, each
    return None


def failure_from_error(error: ValidationError, resolver=None) -> RawValidationFailure:
    """Convert a ``jsonschema`` error into the failure record the translator reads."""
    prop = format_path(error.absolute_path)
    failure = RawValidationFailure(
        property=prop,
        name=error.validator,
        argument=error.validator_value,
        message=error.message,
        schema=error.schema if isinstance(error.schema, dict) else {},
    )

    if error.validator == "required":
        failure.argument = _missing_property(error)
        failure.message = f"requires property {failure.argument!r}"
    elif error.validator == "type":
        types = error.validator_value
        failure.argument = [types] if isinstance(types, str) else list(types)
    elif error.validator == "enum":
        failure.message = "is not one of enum values: " + ", ".join(str(v) for v in error.validator_value)
    elif error.validator in ("dependencies", "dependentRequired"):
        failure.name = "dependencies"
        found = _failed_dependency(error)
        if found is not None:
            dependent, dependency = found
            failure.argument = f"{prop}.{dependent}"
            failure.dependency = dependency
            failure.message = f"property {dependency} not found, required by {failure.argument}"
    elif error.validator == "anyOf" and resolver is not None:
        failure.schema = dereference(failure.schema, resolver)

    failure.stack = f"{prop} {failure.message}"
    return failure


def validate_body(body: Any, bundle: SchemaBundle) -> list[RawValidationFailure]:
    """Validate ``body`` against the bundle's schema and return every failure."""
    validator = PermitValidator(
        bundle.schema_to_use,
        registry=bundle.registry,
        format_checker=format_checker,
    )
    resolver = bundle.registry.resolver()
    failures = [failure_from_error(error, resolver) for error in validator.iter_errors(body)]
    logger.info("Schema '%s': %d validation failure(s)", bundle.name, len(failures))
    return failures


def get_field_validation_errors(body: Any, bundle: SchemaBundle) -> list[NormalizedError]:
    failures = validate_body(body, bundle)
    if not failures:
        return []
    return process_errors(failures, bundle.dereferenced)


def validate_files(
    uploads: Mapping[str, UploadedFile | None],
    bundle: SchemaBundle,
) -> list[NormalizedError]:
    """Check every file slot declared by the bundle's schema against ``uploads``."""
    errors: list[NormalizedError] = []
    slots = find_file_fields(bundle.dereferenced)
    for slot in slots:
        for field_name, field_schema in slot.items():
            constraints = FieldConstraints.from_schema(field_schema)
            errors.extend(validate_file(uploads.get(field_name), constraints, field_name))
    unexpected = set(uploads) - {name for slot in slots for name in slot}
    if unexpected:
        logger.warning("Ignoring uploads for undeclared fields: %s", ", ".join(sorted(unexpected)))
    return errors


def validate_application(
    body: Any,
    uploads: Mapping[str, UploadedFile | None],
    bundle: SchemaBundle,
) -> tuple[list[NormalizedError], str]:
    """
    Validate the body and the uploads of one submission.
    Returns the error records (messages filled in) and the summary message.
    """
    errors = get_field_validation_errors(body, bundle)
    errors.extend(validate_files(uploads, bundle))
    return errors, generate_error_message(errors)
