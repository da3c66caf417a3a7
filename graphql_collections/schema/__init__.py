# Copyright 2021-present Kensho Technologies, LLC.
from typing import Any, FrozenSet, Optional

from graphql import GraphQLBoolean, GraphQLFloat, GraphQLInt, GraphQLScalarType, GraphQLString

from .literal_parsing import parse_json_literal


def _identity(value: Any) -> Any:
    """Return the value unchanged."""
    return value


GraphQLJSON = GraphQLScalarType(
    name="JSON",
    description=(
        "The `JSON` scalar type represents raw JSON values: numbers, strings, booleans, lists "
        "and objects nested arbitrarily. Values are passed through without coercion. As an "
        "argument, it carries filter expressions written in the store's query language, "
        'for example `{age: {greaterThan: 21}, name: {startsWith: "S"}}`.'
    ),
    serialize=_identity,
    parse_value=_identity,
    parse_literal=parse_json_literal,
)


STRING_TYPE_TAG = "string"
INTEGER_TYPE_TAG = "integer"
BOOLEAN_TYPE_TAG = "boolean"
FLOAT_TYPE_TAG = "float"
JSON_TYPE_TAG = "json"

TYPE_TAG_TO_GRAPHQL_TYPE = {
    STRING_TYPE_TAG: GraphQLString,
    INTEGER_TYPE_TAG: GraphQLInt,
    BOOLEAN_TYPE_TAG: GraphQLBoolean,
    FLOAT_TYPE_TAG: GraphQLFloat,
    JSON_TYPE_TAG: GraphQLJSON,
}
SUPPORTED_TYPE_TAGS: FrozenSet[str] = frozenset(TYPE_TAG_TO_GRAPHQL_TYPE)


def get_graphql_scalar_type(type_tag: Optional[str]) -> GraphQLScalarType:
    """Return the GraphQL scalar type for an attribute type tag, defaulting to String.

    Matching is case-insensitive. Unknown or missing type tags map to GraphQLString.
    """
    if not isinstance(type_tag, str):
        return GraphQLString
    return TYPE_TAG_TO_GRAPHQL_TYPE.get(type_tag.lower(), GraphQLString)
