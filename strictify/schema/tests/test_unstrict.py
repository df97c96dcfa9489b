"""Tests for mapping strict-mode tool-call arguments back to the original schema."""

from __future__ import annotations

from typing import Any

import pytest

from strictify.schema import (
    can_be_null,
    unstrictify_tool_call_arguments,
    unstrictify_tool_call_params,
)


def _user_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "user": {
                "type": "object",
                "properties": {"name": {"type": "string"}, "email": {"type": "string"}},
                "required": ["name"],
            },
        },
        "required": ["user"],
    }


class TestUnstrictifyParams:
    def test_null_for_optional_param_is_removed(self) -> None:
        schema = {
            "type": "object",
            "properties": {"required": {"type": "string"}, "optional": {"type": "string"}},
            "required": ["required"],
        }

        result = unstrictify_tool_call_params(schema, {"required": "value", "optional": None})

        assert result == {"required": "value"}

    def test_null_for_required_param_is_kept(self) -> None:
        schema = {
            "type": "object",
            "properties": {"param1": {"type": "string"}, "param2": {"type": "string"}},
            "required": ["param1", "param2"],
        }
        params = {"param1": None, "param2": "value"}

        assert unstrictify_tool_call_params(schema, params) == params

    def test_null_for_nullable_param_is_kept(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "param1": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                "param2": {"type": "string"},
            },
            "required": [],
        }

        result = unstrictify_tool_call_params(schema, {"param1": None, "param2": None})

        assert result == {"param1": None}

    def test_null_is_replaced_by_default(self) -> None:
        schema = {"type": "object", "properties": {"limit": {"type": "integer", "default": 10}}}

        assert unstrictify_tool_call_params(schema, {"limit": None}) == {"limit": 10}

    def test_nested_objects(self) -> None:
        result = unstrictify_tool_call_params(
            _user_schema(), {"user": {"name": "John Doe", "email": None}}
        )

        assert result == {"user": {"name": "John Doe"}}

    def test_optional_nested_object_with_all_nulls_is_kept(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "config": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": [],
                },
            },
            "required": [],
        }

        result = unstrictify_tool_call_params(schema, {"config": {"name": None}})

        assert result == {"config": {}}

    def test_objects_inside_arrays(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "users": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
                        "required": ["name"],
                    },
                },
            },
            "required": ["users"],
        }

        result = unstrictify_tool_call_params(
            schema, {"users": [{"name": "a", "age": None}, {"name": "b", "age": 3}]}
        )

        assert result == {"users": [{"name": "a"}, {"name": "b", "age": 3}]}

    def test_arrays_of_primitives_are_left_alone(self) -> None:
        schema = {"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}}}}

        assert unstrictify_tool_call_params(schema, {"tags": ["a", None]}) == {"tags": ["a", None]}

    def test_json_string_object_is_parsed(self) -> None:
        result = unstrictify_tool_call_params(
            _user_schema(), {"user": '{"name": "Ada", "email": null}'}
        )

        assert result == {"user": {"name": "Ada"}}

    def test_invalid_json_string_is_kept(self) -> None:
        result = unstrictify_tool_call_params(_user_schema(), {"user": "not json"})

        assert result == {"user": "not json"}

    def test_free_form_object_is_not_recursed(self) -> None:
        schema = {"type": "object", "properties": {"data": {"type": "object"}}, "required": ["data"]}

        result = unstrictify_tool_call_params(schema, {"data": {"anything": None}})

        assert result == {"data": {"anything": None}}

    def test_passthrough_params_are_preserved(self) -> None:
        schema = {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]}

        result = unstrictify_tool_call_params(
            schema, {"name": "John", "_tool_status": "Processing...", "_tool_display": "Hi"}
        )

        assert result == {"name": "John", "_tool_status": "Processing...", "_tool_display": "Hi"}

    def test_custom_passthrough_prefix(self) -> None:
        schema = {"type": "object", "properties": {"name": {"type": "string"}}, "required": ["name"]}

        result = unstrictify_tool_call_params(
            schema,
            {"name": "John", "_app_status": "ok", "_tool_status": "gone"},
            passthrough_prefix="_app_",
        )

        assert result == {"name": "John", "_app_status": "ok"}

    def test_hallucinated_keys_are_dropped(self) -> None:
        schema = {"type": "object", "properties": {"city": {"type": "string"}}, "required": ["city"]}

        result = unstrictify_tool_call_params(
            schema, {"city": "NYC", "temperatur": "celsius", "_tool_status": "Fetching"}
        )

        assert result == {"city": "NYC", "_tool_status": "Fetching"}

    def test_schema_without_properties(self) -> None:
        result = unstrictify_tool_call_params(
            {"type": "object"}, {"anything": "value", "_tool_status": "ok"}
        )

        assert result == {"_tool_status": "ok"}

    def test_non_object_schema_returns_params(self) -> None:
        params = {"name": "John", "_tool_foo": "bar"}

        assert unstrictify_tool_call_params({"type": "string"}, params) == params

    def test_empty_params(self) -> None:
        schema = {"type": "object", "properties": {"name": {"type": "string"}}, "required": []}

        assert unstrictify_tool_call_params(schema, {}) == {}

    def test_unknown_nested_key_raises(self) -> None:
        with pytest.raises(ValueError, match="not found in original schema"):
            unstrictify_tool_call_params(_user_schema(), {"user": {"name": "x", "phone": "1"}})


class TestUnstrictifyArguments:
    def test_parses_json(self) -> None:
        result = unstrictify_tool_call_arguments(
            _user_schema(), '{"user": {"name": "Ada", "email": null}}'
        )

        assert result == {"user": {"name": "Ada"}}

    def test_empty_string_is_no_arguments(self) -> None:
        assert unstrictify_tool_call_arguments(_user_schema(), "  ") == {}

    def test_rejects_non_object_payload(self) -> None:
        with pytest.raises(ValueError, match="must be a JSON object"):
            unstrictify_tool_call_arguments(_user_schema(), "[1, 2]")


class TestCanBeNull:
    def test_null_type(self) -> None:
        assert can_be_null({"type": "null"})

    def test_type_list(self) -> None:
        assert can_be_null({"type": ["string", "null"]})

    def test_any_of_with_null(self) -> None:
        assert can_be_null({"anyOf": [{"type": "string"}, {"type": "null"}]})

    def test_deeply_nested_any_of(self) -> None:
        assert can_be_null({"anyOf": [{"type": "string"}, {"anyOf": [{"type": "null"}]}]})

    def test_one_of_with_null(self) -> None:
        assert can_be_null({"oneOf": [{"type": "null"}, {"type": "integer"}]})

    def test_boolean_schema(self) -> None:
        assert not can_be_null(True)

    def test_without_null(self) -> None:
        assert not can_be_null({"type": "string"})
        assert not can_be_null({"anyOf": [{"type": "string"}, {"type": "number"}]})
