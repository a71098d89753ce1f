"""Tests for hami.core.validation module."""

import pytest

from hami.core.errors import SchemaError
from hami.core.validation import (
    AnySchema,
    ArraySchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    ValidationResult,
    schema_from_dict,
    type_name_of,
    validate,
)


class TestValidationResult:
    def test_valid_iff_no_errors(self):
        assert ValidationResult.from_errors([]).valid is True
        result = ValidationResult.from_errors(["x is required"])
        assert result.valid is False
        assert result.errors == ["x is required"]

    def test_truthiness(self):
        assert ValidationResult(valid=True)
        assert not ValidationResult.from_errors(["boom"])


class TestSchemaFromDict:
    def test_string_aliases(self):
        schema = schema_from_dict({"type": "string", "minLength": 2, "maxLength": 5})
        assert isinstance(schema, StringSchema)
        assert schema.min_length == 2
        assert schema.max_length == 5

    def test_object_required_list(self):
        schema = schema_from_dict(
            {"type": "object", "required": ["a"], "properties": {"a": {"type": "number"}}}
        )
        assert isinstance(schema, ObjectSchema)
        assert schema.required_properties == ["a"]
        assert isinstance(schema.properties["a"], NumberSchema)
        assert schema.required is False

    def test_array_items(self):
        schema = schema_from_dict({"type": "array", "items": {"type": "string"}})
        assert isinstance(schema, ArraySchema)
        assert isinstance(schema.items, StringSchema)

    def test_schema_instance_passthrough(self):
        schema = AnySchema()
        assert schema_from_dict(schema) is schema

    def test_unknown_type(self):
        with pytest.raises(SchemaError, match="Unknown schema type"):
            schema_from_dict({"type": "date"})

    def test_unsupported_key(self):
        with pytest.raises(SchemaError, match="does not support"):
            schema_from_dict({"type": "boolean", "minimum": 1})


class TestTypeNames:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, "boolean"),
            (3, "number"),
            (1.5, "number"),
            ("x", "string"),
            ([1], "array"),
            ({"a": 1}, "object"),
        ],
    )
    def test_type_name_of(self, value, expected):
        assert type_name_of(value) == expected


class TestValidate:
    def test_required_absent(self):
        result = validate(None, {"type": "string", "required": True})
        assert result.errors == ["value is required"]

    def test_required_empty_string(self):
        result = validate("", {"type": "string", "required": True}, "name")
        assert result.errors == ["name is required"]

    def test_optional_absent_is_valid(self):
        assert validate(None, {"type": "number", "minimum": 3}).valid

    def test_type_mismatch_stops_other_checks(self):
        result = validate(5, {"type": "string", "enum": ["a"]}, "a")
        assert result.errors == ["a must be of type string, got number"]

    def test_bool_is_not_a_number(self):
        result = validate(True, {"type": "number"})
        assert result.errors == ["value must be of type number, got boolean"]

    def test_string_constraints(self):
        schema = {"type": "string", "minLength": 3, "maxLength": 4, "pattern": "^a"}
        assert validate("abc", schema).valid
        assert validate("ab", schema).errors == ["value must be at least 3 characters long"]
        assert validate("abcde", schema).errors == ["value must be at most 4 characters long"]
        assert validate("bcd", schema).errors == ["value must match pattern: ^a"]

    def test_invalid_pattern_is_ignored(self):
        assert validate("abc", {"type": "string", "pattern": "("}).valid

    def test_number_bounds(self):
        schema = {"type": "number", "minimum": 1, "maximum": 10}
        assert validate(1, schema).valid
        assert validate(0, schema).errors == ["value must be at least 1"]
        assert validate(11, schema).errors == ["value must be at most 10"]

    def test_nan(self):
        assert validate(float("nan"), {"type": "number"}).errors == [
            "value must be a valid number"
        ]

    def test_enum(self):
        schema = {"type": "string", "enum": ["CWD", "HOME"]}
        assert validate("CWD", schema).valid
        assert validate("X", schema, "strategy").errors == [
            "strategy must be one of: CWD, HOME"
        ]

    def test_object_missing_required_at_root(self):
        schema = {
            "type": "object",
            "required": ["a"],
            "properties": {"a": {"type": "string"}},
        }
        assert validate({}, schema).errors == ["a is required"]

    def test_object_nested_paths(self):
        schema = {
            "type": "object",
            "properties": {
                "inner": {
                    "type": "object",
                    "required": ["x"],
                    "properties": {"y": {"type": "number"}},
                }
            },
        }
        result = validate({"inner": {"y": "no"}}, schema)
        assert result.errors == [
            "inner.x is required",
            "inner.y must be of type number, got string",
        ]

    def test_missing_required_reported_once(self):
        schema = {
            "type": "object",
            "required": ["a"],
            "properties": {"a": {"type": "string", "required": True}},
        }
        assert validate({}, schema).errors == ["a is required"]

    def test_array_length_and_items(self):
        schema = {"type": "array", "minLength": 1, "maxLength": 2, "items": {"type": "number"}}
        assert validate([1, 2], schema).valid
        assert validate([], schema).errors == ["value must have at least 1 items"]
        assert validate([1, 2, 3], schema).errors == ["value must have at most 2 items"]
        assert validate([1, "x"], schema, "nums").errors == [
            "nums[1] must be of type number, got string"
        ]

    def test_any_accepts_everything(self):
        for value in (1, "x", [1], {"a": 1}, True):
            assert validate(value, {"type": "any"}).valid

    def test_collects_all_errors(self):
        schema = {
            "type": "object",
            "required": ["a", "b"],
            "properties": {"c": {"type": "boolean"}},
        }
        result = validate({"c": "yes"}, schema)
        assert len(result.errors) == 3

    def test_absent_object_flagged_required_is_valid(self):
        assert validate(None, {"type": "object", "required": True}).valid

        schema = {
            "type": "object",
            "properties": {"options": {"type": "object", "required": True}},
        }
        assert validate({}, schema).valid

    def test_required_list_on_scalar_is_not_a_presence_flag(self):
        assert validate(None, {"type": "string", "required": ["x"]}).valid

    def test_enum_keeps_booleans_and_numbers_apart(self):
        assert validate(True, {"type": "any", "enum": [1]}).errors == [
            "value must be one of: 1"
        ]
        assert not validate(1, {"type": "any", "enum": [True]}).valid
        assert validate(1.0, {"type": "number", "enum": [1]}).valid

    def test_idempotent(self):
        schema = {
            "type": "object",
            "required": ["name"],
            "properties": {
                "size": {"type": "number", "maximum": 3},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        }
        value = {"size": 9, "tags": ["ok", 2]}
        first = validate(value, schema)
        second = validate(value, schema)
        assert first == second
        assert not first.valid
        assert len(first.errors) == 3
