"""Inline local ``$ref`` pointers.

pydantic emits nested models as ``{"$ref": "#/$defs/Model"}``. Strict mode
sanitization works on self-contained trees, so refs are replaced with the
schema they point at before strictifying.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeGuard

from .errors import SchemaRefError
from .nodes import JsonSchema

__all__ = ["inline_local_refs"]

logger = logging.getLogger(__name__)

_DEFINITION_KEYS = frozenset(["$defs", "definitions"])

# Values under these keys are instance data, not schemas.
_DATA_KEYS = frozenset(["enum", "const", "default", "examples"])


def inline_local_refs(schema: JsonSchema) -> JsonSchema:
    """Return a copy of ``schema`` with every local ``$ref`` inlined.

    Sibling keys next to a ``$ref`` win over the keys of the resolved target.
    ``$defs``/``definitions`` are dropped from the result.

    Raises:
        SchemaRefError: For non-local refs, unresolvable pointers and cycles.
    """
    if not _is_mapping(schema):
        return schema
    return _inline(schema, root=schema, resolving=())


def _inline(node: Any, *, root: Mapping[str, Any], resolving: tuple[str, ...]) -> Any:
    if isinstance(node, (list, tuple)):
        return [_inline(item, root=root, resolving=resolving) for item in node]
    if not _is_mapping(node):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        if not ref.startswith("#"):
            raise SchemaRefError("Only local refs can be inlined", ref)
        if ref in resolving:
            raise SchemaRefError("Cyclic $ref", ref)
        target = _resolve_ref(root=root, ref=ref)
        logger.debug("Inlining %s", ref)
        siblings = {key: value for key, value in node.items() if key != "$ref"}
        return _inline({**target, **siblings}, root=root, resolving=(*resolving, ref))

    result: dict[str, Any] = {}
    for key, value in node.items():
        if key in _DEFINITION_KEYS:
            continue
        if key in _DATA_KEYS:
            result[key] = value
            continue
        if key == "properties" and _is_mapping(value):
            # Property names are free-form, so "$ref" here is a name, not a pointer.
            result[key] = {
                name: _inline(prop, root=root, resolving=resolving) for name, prop in value.items()
            }
            continue
        result[key] = _inline(value, root=root, resolving=resolving)
    return result


def _resolve_ref(*, root: Mapping[str, Any], ref: str) -> Mapping[str, Any]:
    resolved: Any = root
    pointer = ref[1:]
    if pointer:
        if not pointer.startswith("/"):
            raise SchemaRefError("Unexpected $ref format; does not start with #/", ref)
        for token in pointer[1:].split("/"):
            key = token.replace("~1", "/").replace("~0", "~")
            if not _is_mapping(resolved) or key not in resolved:
                raise SchemaRefError("Unresolvable $ref", ref)
            resolved = resolved[key]

    if not _is_mapping(resolved):
        raise SchemaRefError("Expected $ref to resolve to a dictionary", ref)
    return resolved


def _is_mapping(obj: object) -> TypeGuard[Mapping[str, Any]]:
    return isinstance(obj, Mapping)
