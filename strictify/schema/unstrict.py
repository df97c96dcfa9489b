"""Map tool-call arguments produced under a strict schema back to the original.

Strict mode turns optional parameters into required-and-nullable ones, so the
model sends ``null`` for every parameter it meant to leave out. Comparing the
arguments against the *original* schema tells us which of those nulls mean
"absent" and which are real values.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from .nodes import JsonSchema

__all__ = [
    "can_be_null",
    "unstrictify_tool_call_arguments",
    "unstrictify_tool_call_params",
]

logger = logging.getLogger(__name__)


def can_be_null(schema: JsonSchema) -> bool:
    """Whether ``schema`` itself admits ``null``."""
    if not isinstance(schema, Mapping):
        return False

    typ = schema.get("type")
    if typ == "null":
        return True
    if isinstance(typ, list) and "null" in typ:
        return True

    for key in ("anyOf", "oneOf"):
        members = schema.get(key)
        if isinstance(members, list) and any(can_be_null(member) for member in members):
            return True
    return False


def unstrictify_tool_call_params(
    original_schema: JsonSchema,
    params: Mapping[str, Any],
    *,
    passthrough_prefix: str | None = None,
) -> dict[str, Any]:
    """Strip strictification nulls from tool-call ``params``.

    Keys unknown to ``original_schema`` are dropped unless they start with
    ``passthrough_prefix`` (default ``settings.passthrough_prefix``); such keys
    are injected by the caller, not the model, and are kept as-is.
    """
    if not isinstance(original_schema, Mapping) or original_schema.get("type") != "object":
        return dict(params)

    if passthrough_prefix is None:
        from strictify.settings import settings

        passthrough_prefix = settings.passthrough_prefix

    schema_properties = original_schema.get("properties") or {}
    schema_defined: dict[str, Any] = {}
    passthrough: dict[str, Any] = {}
    for key, value in params.items():
        if key in schema_properties:
            schema_defined[key] = value
        elif passthrough_prefix and key.startswith(passthrough_prefix):
            passthrough[key] = value
        else:
            logger.debug("Dropping tool-call parameter %r: not in the original schema", key)

    return {**_unstrictify_object(original_schema, schema_defined), **passthrough}


def unstrictify_tool_call_arguments(
    original_schema: JsonSchema,
    arguments: str,
    *,
    passthrough_prefix: str | None = None,
) -> dict[str, Any]:
    """Parse a raw JSON argument string, then unstrictify it.

    Raises:
        ValueError: If ``arguments`` is not a JSON object.
    """
    value = json.loads(arguments) if arguments.strip() else {}
    if not isinstance(value, dict):
        raise ValueError(f"Tool-call arguments must be a JSON object, got {type(value).__name__}")
    return unstrictify_tool_call_params(
        original_schema, value, passthrough_prefix=passthrough_prefix
    )


def _unstrictify_object(schema: Mapping[str, Any], params: Mapping[str, Any]) -> dict[str, Any]:
    if schema.get("type") != "object":
        raise ValueError(
            f"Tool call parameter schema must be an object, got {schema.get('type')!r}"
        )

    properties = schema.get("properties") or {}
    required = set(schema.get("required") or [])
    result: dict[str, Any] = {}
    for name, value in params.items():
        if name not in properties:
            # The strict schema was derived from this one, so this means the
            # caller paired arguments with the wrong schema.
            raise ValueError(f"Tool call parameter {name!r} not found in original schema")
        prop_schema = properties[name]

        if value is None and name not in required and not can_be_null(prop_schema):
            if isinstance(prop_schema, Mapping) and "default" in prop_schema:
                result[name] = prop_schema["default"]
            continue

        result[name] = _unstrictify_value(prop_schema, value)
    return result


def _unstrictify_value(schema: JsonSchema, value: Any) -> Any:
    if not isinstance(schema, Mapping):
        return value

    typ = schema.get("type")
    if typ == "array":
        item_schema = schema.get("items")
        if not isinstance(value, list) or not isinstance(item_schema, Mapping):
            return value
        if item_schema.get("type") != "object":
            return value
        return [
            _unstrictify_object(item_schema, item) if isinstance(item, dict) else item
            for item in value
        ]

    if typ == "object":
        # Models sometimes send a JSON string where an object was expected.
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                value = parsed
        # Schemas without declared properties (free-form objects) are left alone.
        if schema.get("properties") and isinstance(value, dict):
            return _unstrictify_object(schema, value)
    return value
