"""Strict-mode JSON schema conversion."""

from __future__ import annotations

from .diagnostics import DiagnosticCollector, DiagnosticSink, DroppedKey, LoggingSink, discard
from .errors import SchemaDepthError, SchemaRefError, SchemaShapeError
from .nodes import JsonSchema, NodeKind, classify_node
from .refs import inline_local_refs
from .strict import ensure_strict_json_schema, strictify_object_properties, strictify_property
from .unstrict import (
    can_be_null,
    unstrictify_tool_call_arguments,
    unstrictify_tool_call_params,
)

__all__ = [
    "DiagnosticCollector",
    "DiagnosticSink",
    "DroppedKey",
    "JsonSchema",
    "LoggingSink",
    "NodeKind",
    "SchemaDepthError",
    "SchemaRefError",
    "SchemaShapeError",
    "can_be_null",
    "classify_node",
    "discard",
    "ensure_strict_json_schema",
    "inline_local_refs",
    "strictify_object_properties",
    "strictify_property",
    "unstrictify_tool_call_arguments",
    "unstrictify_tool_call_params",
]
