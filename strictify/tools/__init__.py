"""Tool definitions built on strict schemas."""

from __future__ import annotations

from .function_tool import strict_function_tool, strict_function_tool_from_model

__all__ = ["strict_function_tool", "strict_function_tool_from_model"]
