# Copyright 2021-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
from typing import Any, Dict

from graphql import GraphQLField, GraphQLObjectType

from ..collection import AttributeRule
from ..exceptions import ConfigurationError, UnknownCollectionReference
from ..global_utils import capitalize_identity


def get_singular_query_field_name(identity: str) -> str:
    """Return the name of the query field that finds one record, e.g. "user"."""
    return identity.lower()


def get_plural_query_field_name(identity: str) -> str:
    """Return the name of the query field that finds many records, e.g. "users"."""
    return identity.lower() + "s"


@dataclass
class SchemaRegistry:
    """Everything built during one schema generation, shared by the builders and resolvers.

    A new registry is created for every schema generation and is never reused, so separately
    generated schemas can not observe each other's types or query fields.

    Attributes:
        collections: dict, lowercase collection identity -> collection.
        attribute_rules: dict, lowercase collection identity -> ordered dict of
                         attribute name -> AttributeRule. Filled while building types.
        types: dict, capitalized collection identity -> GraphQLObjectType.
        query_fields: dict, query field name -> GraphQLField. Filled only once every type exists.
    """

    collections: Dict[str, Any]
    attribute_rules: Dict[str, Dict[str, AttributeRule]] = field(default_factory=dict)
    types: Dict[str, GraphQLObjectType] = field(default_factory=dict)
    query_fields: Dict[str, GraphQLField] = field(default_factory=dict)

    def get_collection(self, identity: str) -> Any:
        """Return the collection with the given identity."""
        collection = self.collections.get(identity.lower(), None)
        if collection is None:
            raise UnknownCollectionReference(
                'Collection "{}" is referenced, but no collection with that identity was '
                "provided. Known collections: {}".format(identity, sorted(self.collections))
            )
        return collection

    def get_attribute_rules(self, identity: str) -> Dict[str, AttributeRule]:
        """Return the attribute rules of the collection with the given identity."""
        return self.attribute_rules[self.get_collection(identity).identity.lower()]

    def get_type(self, identity: str) -> GraphQLObjectType:
        """Return the GraphQL type built for the collection with the given identity."""
        graphql_type = self.types.get(capitalize_identity(identity), None)
        if graphql_type is None:
            raise UnknownCollectionReference(
                'No GraphQL type was built for collection "{}". Known types: {}'.format(
                    identity, sorted(self.types)
                )
            )
        return graphql_type

    def get_query_field(self, field_name: str) -> GraphQLField:
        """Return the query field with the given name."""
        query_field = self.query_fields.get(field_name, None)
        if query_field is None:
            raise AssertionError(
                'Query field "{}" was requested before it was built. This is a bug. '
                "Known query fields: {}".format(field_name, sorted(self.query_fields))
            )
        return query_field

    def register_type(self, identity: str, graphql_type: GraphQLObjectType) -> None:
        """Add the GraphQL type of a collection to the registry."""
        self.types[capitalize_identity(identity)] = graphql_type

    def register_query_fields(self, fields: Dict[str, GraphQLField]) -> None:
        """Add query fields to the registry, refusing to replace existing ones."""
        overlapping_names = set(fields).intersection(self.query_fields)
        if overlapping_names:
            raise ConfigurationError(
                "Query fields {} would be defined more than once. Rename the collections "
                "so that their singular and plural forms do not clash.".format(
                    sorted(overlapping_names)
                )
            )
        self.query_fields.update(fields)
