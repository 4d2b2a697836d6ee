"""
Loads permit application schemas from disk.

A schema reference has the form ``<file>#<name>``: the JSON document
``<file>`` under the schema directory, and the top-level entry ``<name>``
inside it. Every top-level entry of a document is registered under its own
name, so schemas can refer to each other with ``{"$ref": "applicantInfo"}``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from referencing import Registry, Resource
from referencing.jsonschema import DRAFT4

from permit_intake.config import settings
from permit_intake.validation.errors import SchemaNotFoundError

logger = logging.getLogger(__name__)


def build_registry(document: dict[str, Any]) -> Registry:
    return Registry().with_resources(
        (name, Resource.from_contents(schema, default_specification=DRAFT4))
        for name, schema in document.items()
        if isinstance(schema, dict)
    )


def dereference(schema: Any, resolver, _seen: tuple[str, ...] = ()) -> Any:
    """Return a copy of ``schema`` with every ``$ref`` replaced by its target."""
    if isinstance(schema, dict):
        ref = schema.get("$ref")
        if isinstance(ref, str):
            if ref in _seen:
                # Recursive reference; leave it in place.
                return schema
            resolved = resolver.lookup(ref)
            return dereference(resolved.contents, resolved.resolver, (*_seen, ref))
        return {key: dereference(value, resolver, _seen) for key, value in schema.items()}
    if isinstance(schema, list):
        return [dereference(item, resolver, _seen) for item in schema]
    return schema


@dataclass
class SchemaBundle:
    """A named schema together with the document it was loaded from."""

    name: str
    full_schema: dict[str, Any]
    schema_to_use: dict[str, Any]
    registry: Registry | None = field(repr=False, default=None)

    def __post_init__(self):
        if self.registry is None:
            self.registry = build_registry(self.full_schema)

    @cached_property
    def dereferenced(self) -> dict[str, Any]:
        return dereference(self.schema_to_use, self.registry.resolver())


class SchemaRepository:
    """Resolves ``<file>#<name>`` references against a schema directory."""

    def __init__(self, schema_dir: Path | str | None = None):
        self.schema_dir = Path(schema_dir or settings.SCHEMA_DIR)
        self._documents: dict[str, dict[str, Any]] = {}
        self._bundles: dict[str, SchemaBundle] = {}

    def load_document(self, filename: str) -> dict[str, Any]:
        if filename not in self._documents:
            path = self.schema_dir / filename
            if not path.is_file():
                raise SchemaNotFoundError(f"Schema file not found: {path}")
            with open(path, encoding="utf-8") as fh:
                self._documents[filename] = json.load(fh)
            logger.info("Loaded schema document %s", path)
        return self._documents[filename]

    def get_validation_schema(self, ref: str) -> SchemaBundle:
        if ref in self._bundles:
            return self._bundles[ref]
        filename, _, name = ref.partition("#")
        name = name.lstrip("/")
        if not filename or not name:
            raise SchemaNotFoundError(f"Malformed schema reference: {ref!r}")
        document = self.load_document(filename)
        if name not in document:
            raise SchemaNotFoundError(f"Schema '{name}' not found in {filename}")
        bundle = SchemaBundle(name=name, full_schema=document, schema_to_use=document[name])
        self._bundles[ref] = bundle
        return bundle
