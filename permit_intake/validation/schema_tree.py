"""
Walks over JSON-schema composition.

A schema node can branch in three ways: through ``allOf`` sub-schemas,
through ``oneOf`` sub-schemas, and through named ``properties``. Every walk
in this module is built on ``iter_branches`` so the keyword handling lives
in one place:

- ``iter_field_schemas`` / ``find_field`` locate the sub-schema(s) at a path
- ``get_all_required`` collects ``required`` names through ``allOf``
- ``find_file_fields`` collects every property declared as ``type: file``

Schemas are expected to be dereferenced (no ``$ref``) before walking.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Sequence

Schema = dict[str, Any]


class Edge(str, Enum):
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    PROPERTY = "properties"


@dataclass(frozen=True)
class Branch:
    """A child of a schema node, tagged with the keyword that leads to it."""

    edge: Edge
    schema: Schema
    name: str | None = None


def iter_branches(schema: Schema, edges: Sequence[Edge] = tuple(Edge)) -> Iterator[Branch]:
    """Yield the children of ``schema`` reachable through ``edges``, in key order."""
    if not isinstance(schema, dict):
        return
    for key, value in schema.items():
        if key in (Edge.ALL_OF.value, Edge.ONE_OF.value) and Edge(key) in edges:
            for sub_schema in value or []:
                if isinstance(sub_schema, dict):
                    yield Branch(Edge(key), sub_schema)
        elif key == Edge.PROPERTY.value and Edge.PROPERTY in edges:
            for name, sub_schema in (value or {}).items():
                if isinstance(sub_schema, dict):
                    yield Branch(Edge.PROPERTY, sub_schema, name)


def iter_field_schemas(schema: Schema, path: Sequence[str]) -> Iterator[Schema]:
    """
    Yield every sub-schema found at ``path``.

    A segment matches a property of that name; ``allOf`` and ``oneOf``
    branches are searched with the same remaining path, so a field declared
    in several branches is yielded once per branch.
    """
    if not path:
        return
    head, rest = path[0], path[1:]
    for branch in iter_branches(schema):
        if branch.edge is Edge.PROPERTY:
            if branch.name != head:
                continue
            if rest:
                yield from iter_field_schemas(branch.schema, rest)
            else:
                yield branch.schema
        else:
            yield from iter_field_schemas(branch.schema, path)


def find_field(schema: Schema, path: Sequence[str], func: Callable[[Schema], Any]) -> None:
    """Run ``func`` on each sub-schema located at ``path``."""
    for field_schema in iter_field_schemas(schema, path):
        func(field_schema)


def get_all_required(schema: Schema, found: list[str] | None = None) -> list[str]:
    """
    Return the names listed as ``required`` on ``schema`` and its ``allOf`` branches.

    ``found`` is appended to and returned; pass a list to accumulate across
    several schemas.
    """
    if found is None:
        found = []
    if not isinstance(schema, dict):
        return found
    required = schema.get("required")
    if isinstance(required, list):
        found.extend(required)
    for branch in iter_branches(schema, edges=(Edge.ALL_OF,)):
        get_all_required(branch.schema, found)
    return found


def find_file_fields(schema: Schema, found: list[dict[str, Schema]] | None = None) -> list[dict[str, Schema]]:
    """
    Collect ``{field_name: field_schema}`` for every property of type ``file``.

    Nested objects are searched as well as ``allOf`` branches.
    """
    if found is None:
        found = []
    for branch in iter_branches(schema, edges=(Edge.ALL_OF, Edge.PROPERTY)):
        if branch.edge is Edge.ALL_OF:
            find_file_fields(branch.schema, found)
        elif branch.schema.get("type") == "file":
            found.append({branch.name: branch.schema})
        elif branch.schema.get("type") == "object":
            find_file_fields(branch.schema, found)
    return found
