# Copyright 2021-present Kensho Technologies, LLC.
import logging
from typing import Any

from graphql import GraphQLObjectType, GraphQLSchema

from ..collection import BelongsTo, HasMany
from ..exceptions import UnknownCollectionReference, UnsupportedOperationError
from .config import SchemaGenerationConfig
from .query_fields import build_query_fields
from .registry import SchemaRegistry
from .type_builder import build_type


logger = logging.getLogger(__name__)


def _validate_relation_references(registry: SchemaRegistry) -> None:
    """Assert that every relation attribute names a collection whose type has been built."""
    for identity, attribute_rules in registry.attribute_rules.items():
        for attribute_name, rule in attribute_rules.items():
            if isinstance(rule, BelongsTo):
                referenced_identity = rule.model
            elif isinstance(rule, HasMany):
                referenced_identity = rule.collection
            else:
                continue

            if referenced_identity.lower() not in registry.collections:
                raise UnknownCollectionReference(
                    'Attribute "{}" of collection "{}" refers to collection "{}", which was not '
                    "provided. Known collections: {}".format(
                        attribute_name, identity, referenced_identity, sorted(registry.collections)
                    )
                )
            registry.get_type(referenced_identity)


def get_graphql_schema_from_config(config: SchemaGenerationConfig) -> GraphQLSchema:
    """Return a GraphQL schema object for the collections and options of the given config."""
    registry = SchemaRegistry(dict(config.collections_by_identity))

    # Every type has to exist before any query field is built, and every query field has to exist
    # before a relation field is resolved. Relation fields are only computed lazily, so building
    # all types first and all query fields second satisfies both, whatever the collection order.
    for collection in config.collections:
        graphql_type = build_type(collection, registry)
        logger.debug(
            "Built GraphQL type %s for collection %s.", graphql_type.name, collection.identity
        )

    _validate_relation_references(registry)

    for collection in config.collections:
        fields = build_query_fields(collection, registry, config)
        logger.debug(
            "Built query fields %s for collection %s.", sorted(fields), collection.identity
        )

    query_type = GraphQLObjectType(
        "Schema", dict(registry.query_fields), description="Root of the Schema"
    )
    return GraphQLSchema(query=query_type)


def get_graphql_schema(
    collections: Any,
    expose_query_language: bool = False,
    expose_aggregate_fields: bool = False,
    timestamp_attribute: str = "createdAt",
) -> GraphQLSchema:
    """Return a GraphQL schema object exposing the given collections.

    Each collection X gets an object type, a query field "x" that finds one record by primary key
    or unique attributes, and a query field "xs" that finds many records by the remaining
    attributes. Every call builds a new schema and shares no state with previous calls.

    Args:
        collections: mapping or sequence of collections. Each collection must expose "identity",
                     "primary_key", "attributes", "find_one" and "find", and also "count" if
                     aggregate fields are exposed.
        expose_query_language: bool, whether "xs" fields accept a "where" argument of the JSON
                               scalar type, holding a filter in the store's query language.
        expose_aggregate_fields: bool, whether to also expose the getLatestXs, getFirstXs and
                                 countXs query fields, and "start" / "end" arguments that restrict
                                 the timestamp attribute.
        timestamp_attribute: str, the creation timestamp attribute used by aggregate fields.

    Returns:
        GraphQLSchema whose query root holds the query fields of every collection.

    Raises:
        ConfigurationError: if the collections or options are invalid.
        UnknownCollectionReference: if a relation refers to a collection that was not provided.
    """
    config = SchemaGenerationConfig(
        collections,
        expose_query_language=expose_query_language,
        expose_aggregate_fields=expose_aggregate_fields,
        timestamp_attribute=timestamp_attribute,
    )
    return get_graphql_schema_from_config(config)


def get_mutations(*args: Any, **kwargs: Any) -> None:
    """Must not be called. Mutations of collections are not supported."""
    raise UnsupportedOperationError(
        "Mutations are not supported: collections can only be queried. "
        "args / kwargs: {} {}".format(args, kwargs)
    )
