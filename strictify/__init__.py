"""strictify.

Convert JSON schemas to the strict form LLM tool-calling APIs require, and map
strict-mode tool-call arguments back to the original schema.
"""

from __future__ import annotations

from .schema import (
    DiagnosticCollector,
    DroppedKey,
    ensure_strict_json_schema,
    strictify_object_properties,
    strictify_property,
    unstrictify_tool_call_params,
)
from .tools import strict_function_tool, strict_function_tool_from_model

__all__ = [
    "DiagnosticCollector",
    "DroppedKey",
    "ensure_strict_json_schema",
    "strict_function_tool",
    "strict_function_tool_from_model",
    "strictify_object_properties",
    "strictify_property",
    "unstrictify_tool_call_params",
]

try:
    from .version import __version__
except ImportError:
    __version__ = "unknown"
