"""Exceptions raised for schemas outside the supported subset."""

from __future__ import annotations


class SchemaShapeError(TypeError):
    """A schema node has the wrong container type for one of its keywords.

    This points at a bug in whatever produced the schema, not at a normal
    runtime condition, so it is never reported through the diagnostic sink.
    """

    def __init__(self, message: str, path: str) -> None:
        super().__init__(f"{message}; path={path}")
        self.path = path


class SchemaDepthError(ValueError):
    """Schema nesting exceeded the configured depth limit."""

    def __init__(self, max_depth: int, path: str) -> None:
        super().__init__(f"Schema nesting exceeds max_depth={max_depth}; path={path}")
        self.max_depth = max_depth
        self.path = path


class SchemaRefError(ValueError):
    """A ``$ref`` could not be inlined."""

    def __init__(self, message: str, ref: str) -> None:
        super().__init__(f"{message}: {ref!r}")
        self.ref = ref
