"""Strict function-tool definitions for the OpenAI Responses API."""

from __future__ import annotations

import logging
from inspect import cleandoc
from typing import TYPE_CHECKING, Any

from openai.types.responses import FunctionToolParam

from strictify.schema import ensure_strict_json_schema

if TYPE_CHECKING:
    from pydantic import BaseModel

    from strictify.schema import DiagnosticSink

__all__ = ["strict_function_tool", "strict_function_tool_from_model"]

logger = logging.getLogger(__name__)


def strict_function_tool(
    name: str,
    description: str | None,
    parameters: dict[str, Any] | None,
    *,
    sink: DiagnosticSink | None = None,
) -> FunctionToolParam:
    """Build a ``strict=True`` function tool from a raw parameter schema."""
    if not description:
        raise ValueError(
            cleandoc(f"""Tool {name} requires a description.
            Strict function tools are sent to the model with their description;
            add a docstring or pass description= explicitly.
            """)
        )

    try:
        strict_schema = ensure_strict_json_schema(parameters or {}, sink=sink)
    except Exception:
        logger.error("Failed to convert tool '%s' schema to strict", name)
        raise

    return FunctionToolParam(
        type="function",
        name=name,
        description=description,
        parameters=strict_schema,
        strict=True,
    )


def strict_function_tool_from_model(
    model: type[BaseModel],
    name: str | None = None,
    description: str | None = None,
    *,
    sink: DiagnosticSink | None = None,
) -> FunctionToolParam:
    """Build a strict function tool whose parameters are ``model``'s fields.

    The tool name defaults to the class name and the description to the
    class docstring.
    """
    schema = model.model_json_schema()
    doc = cleandoc(model.__doc__) if model.__doc__ else None
    return strict_function_tool(
        name or model.__name__,
        description or doc or schema.get("description"),
        schema,
        sink=sink,
    )
