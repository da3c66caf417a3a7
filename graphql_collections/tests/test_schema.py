# Copyright 2021-present Kensho Technologies, LLC.
import unittest

from graphql import (
    GraphQLBoolean,
    GraphQLError,
    GraphQLFloat,
    GraphQLInt,
    GraphQLString,
    parse_value,
)
import pytest

from ..exceptions import UnsupportedLiteralKind
from ..schema import SUPPORTED_TYPE_TAGS, GraphQLJSON, get_graphql_scalar_type
from ..schema.literal_parsing import parse_json_literal


class TypeConversionTests(unittest.TestCase):
    def test_supported_type_tags(self) -> None:
        self.assertEqual(GraphQLString, get_graphql_scalar_type("string"))
        self.assertEqual(GraphQLInt, get_graphql_scalar_type("integer"))
        self.assertEqual(GraphQLBoolean, get_graphql_scalar_type("boolean"))
        self.assertEqual(GraphQLFloat, get_graphql_scalar_type("float"))
        self.assertEqual(GraphQLJSON, get_graphql_scalar_type("json"))
        self.assertEqual({"string", "integer", "boolean", "float", "json"}, SUPPORTED_TYPE_TAGS)

    def test_type_tags_are_case_insensitive(self) -> None:
        self.assertEqual(GraphQLInt, get_graphql_scalar_type("INTEGER"))
        self.assertEqual(GraphQLBoolean, get_graphql_scalar_type("Boolean"))
        self.assertEqual(GraphQLJSON, get_graphql_scalar_type("JSON"))

    def test_unknown_type_tags_default_to_string(self) -> None:
        for type_tag in ("date", "datetime", "binary", "", None, 42):
            self.assertEqual(GraphQLString, get_graphql_scalar_type(type_tag))


class JSONLiteralParsingTests(unittest.TestCase):
    def test_scalar_literals(self) -> None:
        self.assertEqual(42, parse_json_literal(parse_value("42")))
        self.assertEqual(2.5, parse_json_literal(parse_value("2.5")))
        self.assertIs(True, parse_json_literal(parse_value("true")))
        self.assertIs(False, parse_json_literal(parse_value("false")))
        self.assertEqual("hello", parse_json_literal(parse_value('"hello"')))

    def test_enum_literal_is_its_raw_text(self) -> None:
        self.assertEqual("DESC", parse_json_literal(parse_value("DESC")))

    def test_nested_object_literal(self) -> None:
        value = parse_json_literal(parse_value('{a: 1, b: [true, "x"], c: 2.5}'))
        self.assertEqual({"a": 1, "b": [True, "x"], "c": 2.5}, value)
        self.assertEqual(["a", "b", "c"], list(value))

    def test_deeply_nested_literal(self) -> None:
        value = parse_json_literal(
            parse_value('{or: [{age: {greaterThan: 21}}, {name: {startsWith: "S", in: [A, B]}}]}')
        )
        expected_value = {
            "or": [
                {"age": {"greaterThan": 21}},
                {"name": {"startsWith": "S", "in": ["A", "B"]}},
            ]
        }
        self.assertEqual(expected_value, value)

    def test_empty_literals(self) -> None:
        self.assertEqual({}, parse_json_literal(parse_value("{}")))
        self.assertEqual([], parse_json_literal(parse_value("[]")))

    def test_out_of_range_int_literal(self) -> None:
        with self.assertRaises(GraphQLError):
            parse_json_literal(parse_value("{a: 3000000000}"))

    def test_null_literal_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedLiteralKind):
            parse_json_literal(parse_value("null"))

        with self.assertRaises(UnsupportedLiteralKind):
            parse_json_literal(parse_value("{a: [1, null]}"))

    def test_variable_literal_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedLiteralKind):
            parse_json_literal(parse_value("{a: $limit}"), {"limit": 3})

    def test_json_scalar_passes_values_through(self) -> None:
        value = {"a": [1, "b", None]}
        self.assertIs(value, GraphQLJSON.serialize(value))
        self.assertIs(value, GraphQLJSON.parse_value(value))
        self.assertEqual({"a": 1}, GraphQLJSON.parse_literal(parse_value("{a: 1}")))
