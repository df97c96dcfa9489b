"""Classification of JSON schema nodes into the supported subset."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeGuard

from .errors import SchemaShapeError

__all__ = [
    "COMPOSITION_KEYWORDS",
    "JsonSchema",
    "NodeKind",
    "classify_node",
    "is_array_like",
    "is_empty_schema",
    "is_object_like",
    "looks_like_type_alternatives",
]

JsonSchema = dict[str, Any] | bool

# Checked in this order; only the first one present on a node is honored.
COMPOSITION_KEYWORDS: tuple[str, ...] = ("anyOf", "oneOf", "allOf", "not")


class NodeKind(str, Enum):
    """Closed set of node shapes the strict engine dispatches on."""

    BOOLEAN = "boolean"
    COMPOSITION = "composition"
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    UNTYPED = "untyped"


def classify_node(schema: object, path: str = "$") -> NodeKind:
    """Return the kind of ``schema``.

    Raises:
        SchemaShapeError: If ``schema`` is neither a mapping nor a bool, or
            declares a type list holding both ``object`` and ``array``.
    """
    if isinstance(schema, bool):
        return NodeKind.BOOLEAN
    if not _is_mapping(schema):
        raise SchemaShapeError(
            f"Expected a schema object or boolean, got {type(schema).__name__}", path
        )

    if any(key in schema for key in COMPOSITION_KEYWORDS):
        return NodeKind.COMPOSITION

    if is_object_like(schema, path):
        return NodeKind.OBJECT
    if is_array_like(schema, path):
        return NodeKind.ARRAY
    if schema.get("type") is not None:
        return NodeKind.PRIMITIVE
    return NodeKind.UNTYPED


def is_empty_schema(schema: object) -> bool:
    """True for ``{}``, the schema that accepts any value."""
    return _is_mapping(schema) and len(schema) == 0


def is_object_like(schema: Mapping[str, Any], path: str = "$") -> bool:
    typ = schema.get("type")
    if typ is None:
        return "properties" in schema
    return "object" in _declared_types(typ, path)


def is_array_like(schema: Mapping[str, Any], path: str = "$") -> bool:
    typ = schema.get("type")
    if typ is None:
        return "items" in schema or "prefixItems" in schema
    return "array" in _declared_types(typ, path)


def looks_like_type_alternatives(members: list[Any]) -> bool:
    """Whether an ``anyOf`` lists unrelated type alternatives.

    ``[{}, {"type": "null"}]`` (an "any value, or null" field) is the typical
    case. Members carrying properties or other constraints do not count.
    """
    for member in members:
        if not _is_mapping(member):
            continue
        if len(member) == 0:
            return True
        if member.get("type") == "null":
            return True
    return False


def _declared_types(typ: object, path: str) -> frozenset[str]:
    if isinstance(typ, str):
        return frozenset([typ])
    if not isinstance(typ, list):
        return frozenset()
    types = frozenset(name for name in typ if isinstance(name, str))
    if "object" in types and "array" in types:
        raise SchemaShapeError(f"Type list {typ!r} mixes object and array", path)
    return types


def _is_mapping(obj: object) -> TypeGuard[Mapping[str, Any]]:
    return isinstance(obj, Mapping)
