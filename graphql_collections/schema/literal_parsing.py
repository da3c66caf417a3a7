# Copyright 2021-present Kensho Technologies, LLC.
from typing import Any, Callable, Dict, Optional

from graphql import GraphQLBoolean, GraphQLFloat, GraphQLInt, GraphQLString
from graphql.language import (
    BooleanValueNode,
    EnumValueNode,
    FloatValueNode,
    IntValueNode,
    ListValueNode,
    ObjectValueNode,
    StringValueNode,
    ValueNode,
)

from ..exceptions import UnsupportedLiteralKind


def _parse_enum_literal(value_node: EnumValueNode, variables: Optional[Dict[str, Any]]) -> str:
    """Enum values have no type here, so their raw text is used verbatim."""
    return str(value_node.value)


def _parse_list_literal(value_node: ListValueNode, variables: Optional[Dict[str, Any]]) -> list:
    """Parse each element of the list, in source order."""
    return [parse_json_literal(element, variables) for element in value_node.values]


def _parse_object_literal(
    value_node: ObjectValueNode, variables: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """Parse each field's value, keyed by field name, in the order the fields are written."""
    return {
        field_node.name.value: parse_json_literal(field_node.value, variables)
        for field_node in value_node.fields
    }


# The built-in scalars apply GraphQL's own literal rules, e.g. the 32-bit range of Int.
_LITERAL_PARSERS: Dict[str, Callable[[Any, Optional[Dict[str, Any]]], Any]] = {
    IntValueNode.kind: lambda value_node, _: GraphQLInt.parse_literal(value_node),
    FloatValueNode.kind: lambda value_node, _: GraphQLFloat.parse_literal(value_node),
    BooleanValueNode.kind: lambda value_node, _: GraphQLBoolean.parse_literal(value_node),
    StringValueNode.kind: lambda value_node, _: GraphQLString.parse_literal(value_node),
    EnumValueNode.kind: _parse_enum_literal,
    ListValueNode.kind: _parse_list_literal,
    ObjectValueNode.kind: _parse_object_literal,
}


def parse_json_literal(value_node: ValueNode, variables: Optional[Dict[str, Any]] = None) -> Any:
    """Convert a GraphQL literal into the equivalent native Python value.

    Args:
        value_node: ValueNode, the literal as parsed from the query text.
        variables: optional dict of query variables; accepted for compatibility with the
                   GraphQLScalarType.parse_literal signature.

    Returns:
        int, float, bool, str, list or dict, nested as in the literal. Object keys and list
        elements keep their source order.

    Raises:
        UnsupportedLiteralKind: if the literal contains a node kind without a native conversion,
                                for example null or a variable nested inside the literal.
    """
    parser = _LITERAL_PARSERS.get(value_node.kind, None)
    if parser is None:
        raise UnsupportedLiteralKind(
            "Cannot convert GraphQL literal of kind {} to a JSON value: {}".format(
                value_node.kind, value_node
            )
        )
    return parser(value_node, variables)
