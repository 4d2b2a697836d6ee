"""
Turns raw validator failures into NormalizedError records.

Each validator keyword has its own handler. Keywords without a handler
(``allOf``, ``minLength``, ...) are skipped; the failures that matter for
them surface through the nested keywords the validator also reports.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from permit_intake.validation.errors import (
    DependencyParseError,
    ErrorType,
    NormalizedError,
    RawValidationFailure,
)
from permit_intake.validation.schema_tree import Schema, get_all_required, iter_field_schemas

logger = logging.getLogger(__name__)

INSTANCE = "instance"


def remove_instance(prop: str) -> str:
    """Strip the leading ``instance`` marker from a validator property path."""
    if prop == INSTANCE:
        return ""
    if prop.startswith(INSTANCE + "."):
        return prop[len(INSTANCE) + 1:]
    return prop


def combine_prop_argument(prop: str, argument: str) -> str:
    """Join a parent path and a child name, skipping the dot at the root."""
    if prop:
        return f"{prop}.{argument}"
    return argument


def parse_dependency(stack: str) -> str:
    """
    Pull the dependency name out of a diagnostic such as
    ``instance property zipCode not found, required by instance.address``.
    """
    _, marker, tail = stack.partition(" property ")
    if not marker:
        raise DependencyParseError(f"No ' property ' marker in dependency diagnostic: {stack!r}")
    dependency, marker, _ = tail.partition(" not ")
    if not marker or not dependency:
        raise DependencyParseError(f"No ' not ' marker in dependency diagnostic: {stack!r}")
    return dependency


class ErrorTranslator:
    """Translates the failures for one validated document."""

    def __init__(
        self,
        schema: Schema,
        dependency_parser: Callable[[str], str] = parse_dependency,
    ):
        self.schema = schema
        self.dependency_parser = dependency_parser
        self._handlers: dict[str, Callable[[RawValidationFailure], list[NormalizedError]]] = {
            "required": self.handle_missing_error,
            "type": self.handle_type_error,
            "format": self.handle_format_error,
            "pattern": self.handle_format_error,
            "enum": self.handle_enum_error,
            "dependencies": self.handle_dependency_error,
            "anyOf": self.handle_any_of_error,
        }

    def translate(self, failures: Iterable[RawValidationFailure]) -> list[NormalizedError]:
        errors: list[NormalizedError] = []
        for failure in failures:
            handler = self._handlers.get(failure.name)
            if handler is None:
                logger.debug("Ignoring '%s' failure at %s", failure.name, failure.property)
                continue
            errors.extend(handler(failure))
        return errors

    def handle_missing_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        field = combine_prop_argument(remove_instance(failure.property), failure.argument)
        errors = [NormalizedError(field, ErrorType.MISSING)]

        # A missing object also means every field it requires is missing.
        required: list[str] = []
        for field_schema in iter_field_schemas(self.schema, field.split(".")):
            get_all_required(field_schema, required)
        errors.extend(NormalizedError(f"{field}.{name}", ErrorType.MISSING) for name in required)
        return errors

    def handle_type_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        expected = failure.argument
        if isinstance(expected, (list, tuple)):
            expected = expected[0]
        return [
            NormalizedError(
                remove_instance(failure.property),
                ErrorType.TYPE,
                expected_field_type=expected,
            )
        ]

    def handle_format_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        return [NormalizedError(remove_instance(failure.property), ErrorType.FORMAT)]

    def handle_enum_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        return [
            NormalizedError(
                remove_instance(failure.property),
                ErrorType.ENUM,
                enum_message=failure.message,
            )
        ]

    def handle_dependency_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        dependency = failure.dependency or self.dependency_parser(failure.stack)
        dependent_field = remove_instance(failure.argument)
        parent = remove_instance(failure.property)
        return [
            NormalizedError(
                dependent_field,
                ErrorType.DEPENDENCIES,
                dependency=combine_prop_argument(parent, dependency),
            )
        ]

    def handle_any_of_error(self, failure: RawValidationFailure) -> list[NormalizedError]:
        prop = remove_instance(failure.property)
        options: list[str] = []
        for branch in failure.schema.get("anyOf", []):
            required = branch.get("required") if isinstance(branch, dict) else None
            if not required:
                logger.debug("anyOf branch at %s has no required fields", failure.property)
                continue
            options.append(combine_prop_argument(prop, required[0]))
        if not options:
            return []
        return [NormalizedError(None, ErrorType.ANY_OF, any_of_fields=options)]


def process_errors(
    failures: Iterable[RawValidationFailure],
    schema: Schema,
    dependency_parser: Callable[[str], str] = parse_dependency,
) -> list[NormalizedError]:
    """Translate ``failures`` against the (dereferenced) ``schema`` they came from."""
    return ErrorTranslator(schema, dependency_parser).translate(failures)
