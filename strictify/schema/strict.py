"""Rewrite JSON schemas so they satisfy strict tool-calling mode.

Strict mode needs every declared property listed in ``required``, every object
closed with ``additionalProperties: false`` and none of the validation keywords
providers reject. Optional properties become required properties whose schema
also accepts ``null``::

    {"type": "object", "properties": {"a": {"type": "string"}}}

becomes::

    {
        "type": "object",
        "properties": {"a": {"anyOf": [{"type": "null"}, {"type": "string"}]}},
        "required": ["a"],
        "additionalProperties": False,
    }

Nothing here mutates its input; every handler builds new containers.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any, TypeGuard

from .diagnostics import DiagnosticSink, DroppedKey, default_sink
from .errors import SchemaDepthError, SchemaShapeError
from .nodes import (
    COMPOSITION_KEYWORDS,
    JsonSchema,
    NodeKind,
    classify_node,
    is_array_like,
    is_empty_schema,
    is_object_like,
    looks_like_type_alternatives,
)
from .refs import inline_local_refs

__all__ = [
    "ensure_strict_json_schema",
    "strictify_object_properties",
    "strictify_property",
]

logger = logging.getLogger(__name__)

_EMPTY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {},
    "required": [],
    "additionalProperties": False,
}

# Keywords not supported by strict structured outputs.
_UNSUPPORTED_KEYWORDS = frozenset(
    [
        # Meta keywords
        "$schema",
        "$id",
        "$comment",
        "examples",
        "deprecated",
        # String constraints
        "minLength",
        "maxLength",
        "pattern",
        "format",
        # Number constraints
        "minimum",
        "maximum",
        "exclusiveMinimum",
        "exclusiveMaximum",
        "multipleOf",
        # Object constraints
        "patternProperties",
        "unevaluatedProperties",
        "propertyNames",
        "minProperties",
        "maxProperties",
        # Array constraints
        "minItems",
        "maxItems",
        "uniqueItems",
        "unevaluatedItems",
        "contains",
        "minContains",
        "maxContains",
        # Conditional
        "if",
        "then",
        "else",
        "dependentRequired",
        "dependentSchemas",
        # Access modifiers
        "readOnly",
        "writeOnly",
        # Content
        "contentMediaType",
        "contentEncoding",
    ]
)

# Removed without a diagnostic.
_SILENT_KEYWORDS = frozenset(["default"])

_OBJECT_KEYWORDS = frozenset(["type", "properties", "required", "additionalProperties"])

# Catch-all for schemas without a type; objects and arrays are excluded.
_ANY_VALUE_TYPES = ("string", "number", "integer", "boolean", "null")


@dataclass(frozen=True)
class _Walk:
    sink: DiagnosticSink
    max_depth: int | None

    def descend(self, depth: int, path: str) -> int:
        depth += 1
        if self.max_depth is not None and depth > self.max_depth:
            raise SchemaDepthError(self.max_depth, path)
        return depth


def strictify_property(
    schema: JsonSchema,
    is_required: bool,
    debug_path: str = "$",
    *,
    sink: DiagnosticSink | None = None,
    max_depth: int | None = None,
) -> JsonSchema | None:
    """Strictify the schema of one property.

    Args:
        schema: The property's schema.
        is_required: Whether the property is listed in its parent's ``required``.
            Optional properties come back wrapped in a nullable union.
        debug_path: Dotted path used to localize diagnostics.
        sink: Receives one ``DroppedKey`` per removed keyword.
        max_depth: Nesting limit; defaults to ``settings.max_depth``.

    Returns:
        The strict schema, or ``None`` when nothing can satisfy it (an array
        whose items all sanitize away, or ``not: {}``). Callers omit the
        property in that case.
    """
    return _strictify(schema, is_required, debug_path, _make_walk(sink, max_depth), 0)


def strictify_object_properties(
    properties: Mapping[str, JsonSchema],
    required: Collection[str] | None,
    debug_path: str | None = None,
    *,
    sink: DiagnosticSink | None = None,
    max_depth: int | None = None,
) -> dict[str, JsonSchema]:
    """Strictify every property of an object schema.

    Properties whose schema sanitizes to nothing are left out of the result,
    so the result's keys are exactly what the parent should list as required.
    """
    return _strictify_properties(properties, required, debug_path, _make_walk(sink, max_depth), 0)


def ensure_strict_json_schema(
    schema: dict[str, Any],
    *,
    sink: DiagnosticSink | None = None,
    max_depth: int | None = None,
) -> dict[str, Any]:
    """Strictify a complete tool parameter schema.

    Local ``$ref`` pointers are inlined first. The root must describe an
    object; the returned schema is always a new tree.
    """
    if schema == {}:
        return _empty_schema()
    if not _is_mapping(schema):
        raise SchemaShapeError(f"Expected {schema!r} to be a dictionary", "$")

    inlined = inline_local_refs(schema)
    if not _is_mapping(inlined) or not is_object_like(inlined):
        raise SchemaShapeError(
            f"Tool parameter schema must describe an object, got type={schema.get('type')!r}",
            "$",
        )

    result = strictify_property(inlined, True, "$", sink=sink, max_depth=max_depth)
    if not _is_mapping(result):
        logger.warning("Schema at $ does not sanitize to an object; using an empty object schema")
        return _empty_schema()
    return dict(result)


def _make_walk(sink: DiagnosticSink | None, max_depth: int | None) -> _Walk:
    if max_depth is None:
        from strictify.settings import settings

        max_depth = settings.max_depth
    return _Walk(sink=sink if sink is not None else default_sink(), max_depth=max_depth)


def _empty_schema() -> dict[str, Any]:
    return {**_EMPTY_SCHEMA, "properties": {}, "required": []}


# ---------------------------------------------------------------------------
# Property walker
# ---------------------------------------------------------------------------


def _strictify_properties(
    properties: object,
    required: object,
    debug_path: str | None,
    walk: _Walk,
    depth: int,
) -> dict[str, JsonSchema]:
    owner = debug_path or "$"
    if not _is_mapping(properties):
        raise SchemaShapeError(
            f"Expected properties to be a dictionary, got {type(properties).__name__}", owner
        )
    required_names = _required_names(required, owner)

    result: dict[str, JsonSchema] = {}
    for name, prop_schema in properties.items():
        path = f"{debug_path}.{name}" if debug_path else f"$.{name}"
        sanitized = _strictify(prop_schema, name in required_names, path, walk, depth)
        if sanitized is None:
            logger.debug("Dropping property %s: its schema admits no value", path)
            continue
        result[name] = sanitized
    return result


def _required_names(required: object, path: str) -> frozenset[str]:
    if required is None:
        return frozenset()
    if isinstance(required, (str, bytes)) or not isinstance(required, Collection):
        raise SchemaShapeError(
            f"Expected required to be a list of names, got {type(required).__name__}", path
        )
    names = frozenset(required)
    if not all(isinstance(name, str) for name in names):
        raise SchemaShapeError(f"Expected required to contain only strings: {required!r}", path)
    return names


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _strictify(
    schema: object,
    is_required: bool,
    path: str,
    walk: _Walk,
    depth: int,
) -> JsonSchema | None:
    depth = walk.descend(depth, path)
    kind = classify_node(schema, path)

    if kind is NodeKind.BOOLEAN:
        return _strictify_boolean(schema, is_required)  # type: ignore[arg-type]

    node = _strip_unsupported(schema, path, walk.sink)  # type: ignore[arg-type]
    match kind:
        case NodeKind.COMPOSITION:
            return _strictify_composition(node, is_required, path, walk, depth)
        case NodeKind.OBJECT:
            return _nullable_unless(is_required, _close_object(node, path, walk, depth))
        case NodeKind.ARRAY:
            return _strictify_array(node, is_required, path, walk, depth)
        case NodeKind.PRIMITIVE:
            return _nullable_unless(is_required, node)
        case NodeKind.UNTYPED:
            return _nullable_unless(is_required, _any_value(node))
    raise AssertionError(f"Unhandled node kind {kind!r}; path={path}")


# ---------------------------------------------------------------------------
# Leaf sanitizer
# ---------------------------------------------------------------------------


def _strip_unsupported(
    schema: Mapping[str, Any], path: str, sink: DiagnosticSink
) -> dict[str, Any]:
    kept: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _UNSUPPORTED_KEYWORDS:
            if value is not None:
                sink(DroppedKey(path, key))
            continue
        if key in _SILENT_KEYWORDS:
            continue
        kept[key] = value
    return kept


def _strictify_boolean(schema: bool, is_required: bool) -> JsonSchema:
    # ``false`` admits nothing, so there is no nullable variant of it.
    if schema is False or is_required:
        return schema
    return _nullable(schema)


def _any_value(node: dict[str, Any]) -> dict[str, Any]:
    rest = {key: value for key, value in node.items() if key != "type"}
    return {"anyOf": [{"type": typ} for typ in _ANY_VALUE_TYPES], **rest}


def _nullable(schema: JsonSchema) -> dict[str, Any]:
    return {"anyOf": [{"type": "null"}, schema]}


def _nullable_unless(is_required: bool, schema: JsonSchema) -> JsonSchema:
    return schema if is_required else _nullable(schema)


# ---------------------------------------------------------------------------
# Object / array handlers
# ---------------------------------------------------------------------------


def _close_object(
    node: dict[str, Any], path: str, walk: _Walk, depth: int
) -> dict[str, Any]:
    properties = node.get("properties")
    if properties is None:
        properties = {}
    strict_properties = _strictify_properties(
        properties, node.get("required"), path, walk, depth
    )

    additional = node.get("additionalProperties")
    if additional is not None and additional is not False:
        walk.sink(DroppedKey(path, "additionalProperties"))

    return {
        "type": "object",
        **node,
        "properties": strict_properties,
        "required": list(strict_properties),
        "additionalProperties": False,
    }


def _strictify_array(
    node: dict[str, Any], is_required: bool, path: str, walk: _Walk, depth: int
) -> JsonSchema | None:
    array = _close_array(node, is_required, path, walk, depth)
    if array is None:
        return None
    return _nullable_unless(is_required, array)


def _close_array(
    node: dict[str, Any], is_required: bool, path: str, walk: _Walk, depth: int
) -> dict[str, Any] | None:
    prefix_items = node.get("prefixItems")
    if prefix_items is not None and not _is_list(prefix_items):
        raise SchemaShapeError(
            f"Expected prefixItems to be a list of schemas, got {type(prefix_items).__name__}",
            path,
        )

    if prefix_items:
        # 2020-12 tuple form; strict mode only accepts the list form of ``items``.
        if node.get("items") is not None:
            walk.sink(DroppedKey(path, "items"))
        items, items_key = prefix_items, "prefixItems"
    else:
        items, items_key = node.get("items"), "items"
        if items is None:
            items = {}

    strict_items: JsonSchema | list[JsonSchema]
    if _is_list(items):
        # Tuple form: each position keeps the owning property's required-ness.
        strict_items = []
        for index, item in enumerate(items):
            item_path = f"{path}.{items_key}[{index}]"
            sanitized = _strictify(item, is_required, item_path, walk, depth)
            if sanitized is not None:
                strict_items.append(sanitized)
        if not strict_items:
            return None
    elif isinstance(items, bool) or _is_mapping(items):
        # Array elements are always present, so the item schema is never nullable.
        sanitized = _strictify(items, True, f"{path}.items", walk, depth)
        if sanitized is None:
            return None
        strict_items = sanitized
    else:
        raise SchemaShapeError(
            f"Expected items to be a schema or a list of schemas, got {type(items).__name__}",
            path,
        )

    rest = {key: value for key, value in node.items() if key != "prefixItems"}
    return {"type": "array", **rest, "items": strict_items}


# ---------------------------------------------------------------------------
# Composition handler
# ---------------------------------------------------------------------------


def _strictify_composition(
    node: dict[str, Any], is_required: bool, path: str, walk: _Walk, depth: int
) -> JsonSchema | None:
    operator = next(key for key in COMPOSITION_KEYWORDS if key in node)
    members = node[operator]

    siblings: dict[str, Any] = {}
    for key, value in node.items():
        if key == operator:
            continue
        if key in COMPOSITION_KEYWORDS:
            # Only one composition keyword is honored per node.
            walk.sink(DroppedKey(path, key))
            continue
        siblings[key] = value

    if (
        operator == "anyOf"
        and siblings.get("type") == "object"
        and _is_list(members)
        and looks_like_type_alternatives(members)
    ):
        siblings = {key: value for key, value in siblings.items() if key not in _OBJECT_KEYWORDS}
    elif is_object_like(siblings, path):
        # allOf (and constraint-style anyOf/oneOf) layer onto the parent object,
        # which must itself be closed.
        siblings = _close_object(siblings, path, walk, depth)
    elif is_array_like(siblings, path):
        closed = _close_array(siblings, is_required, path, walk, depth)
        if closed is None:
            logger.debug("Dropping %s at %s: its array items admit no value", operator, path)
            return None
        siblings = closed

    if operator == "not":
        composite = _strictify_not(members, siblings, is_required, path, walk, depth)
        if composite is None:
            return None
        return _nullable_unless(is_required, composite)

    if not _is_list(members):
        raise SchemaShapeError(
            f"Expected {operator} to be a list of schemas, got {type(members).__name__}", path
        )

    survivors: list[JsonSchema] = []
    for index, member in enumerate(members):
        sanitized = _strictify(member, is_required, f"{path}.{operator}[{index}]", walk, depth)
        if sanitized is not None:
            survivors.append(sanitized)

    if members and not survivors:
        logger.debug("Dropping %s at %s: no member admits a value", operator, path)
        return None

    # A one-member union is the member itself. allOf keeps its wrapper because
    # its members combine with the sibling keys.
    if operator in ("anyOf", "oneOf") and len(survivors) == 1:
        return survivors[0]

    return _nullable_unless(is_required, {**siblings, operator: survivors})


def _strictify_not(
    member: object,
    siblings: dict[str, Any],
    is_required: bool,
    path: str,
    walk: _Walk,
    depth: int,
) -> dict[str, Any] | None:
    if not (isinstance(member, bool) or _is_mapping(member)):
        raise SchemaShapeError(
            f"Expected not to be a schema, got {type(member).__name__}", path
        )
    # "not anything" can never be satisfied.
    if member is True or is_empty_schema(member):
        logger.debug("Dropping unsatisfiable 'not' at %s", path)
        return None

    sanitized = _strictify(member, is_required, f"{path}.not", walk, depth)
    if sanitized is None:
        return None
    return {**siblings, "not": sanitized}


def _is_mapping(obj: object) -> TypeGuard[Mapping[str, Any]]:
    return isinstance(obj, Mapping)


def _is_list(obj: object) -> TypeGuard[list[Any]]:
    return isinstance(obj, (list, tuple))
