"""Tests for local $ref inlining."""

from __future__ import annotations

import pytest

from strictify.schema import SchemaRefError, inline_local_refs


def test_inlines_defs() -> None:
    schema = {
        "type": "object",
        "properties": {"home": {"$ref": "#/$defs/Address"}, "work": {"$ref": "#/$defs/Address"}},
        "$defs": {"Address": {"type": "object", "properties": {"city": {"type": "string"}}}},
    }

    result = inline_local_refs(schema)

    address = {"type": "object", "properties": {"city": {"type": "string"}}}
    assert result == {"type": "object", "properties": {"home": address, "work": address}}


def test_sibling_keys_win() -> None:
    schema = {
        "properties": {"a": {"$ref": "#/definitions/A", "description": "local"}},
        "definitions": {"A": {"type": "string", "description": "shared"}},
    }

    result = inline_local_refs(schema)

    assert result == {"properties": {"a": {"type": "string", "description": "local"}}}


def test_nested_refs() -> None:
    schema = {
        "$ref": "#/$defs/Outer",
        "$defs": {
            "Outer": {"type": "object", "properties": {"inner": {"$ref": "#/$defs/Inner"}}},
            "Inner": {"type": "integer"},
        },
    }

    result = inline_local_refs(schema)

    assert result == {"type": "object", "properties": {"inner": {"type": "integer"}}}


def test_escaped_pointer() -> None:
    schema = {
        "properties": {"a": {"$ref": "#/$defs/a~1b"}},
        "$defs": {"a/b": {"type": "boolean"}},
    }

    assert inline_local_refs(schema) == {"properties": {"a": {"type": "boolean"}}}


def test_property_named_ref_is_not_a_pointer() -> None:
    schema = {"type": "object", "properties": {"$ref": {"type": "string"}}}

    assert inline_local_refs(schema) == schema


def test_enum_values_are_left_alone() -> None:
    schema = {"enum": [{"$ref": "not-a-pointer"}]}

    assert inline_local_refs(schema) == schema


def test_input_is_not_mutated() -> None:
    schema = {"properties": {"a": {"$ref": "#/$defs/A"}}, "$defs": {"A": {"type": "string"}}}

    inline_local_refs(schema)

    assert schema["properties"]["a"] == {"$ref": "#/$defs/A"}
    assert "$defs" in schema


def test_cycle_raises() -> None:
    schema = {
        "$ref": "#/$defs/Node",
        "$defs": {
            "Node": {"type": "object", "properties": {"child": {"$ref": "#/$defs/Node"}}},
        },
    }

    with pytest.raises(SchemaRefError) as exc_info:
        inline_local_refs(schema)

    assert exc_info.value.ref == "#/$defs/Node"


@pytest.mark.parametrize(
    "ref",
    ["https://example.com/schema.json", "#/$defs/Missing", "#$defs/A"],
)
def test_bad_refs_raise(ref: str) -> None:
    schema = {"properties": {"a": {"$ref": ref}}, "$defs": {"A": {"type": "string"}}}

    with pytest.raises(SchemaRefError):
        inline_local_refs(schema)


def test_boolean_schema_is_returned() -> None:
    assert inline_local_refs(True) is True
