# Copyright 2021-present Kensho Technologies, LLC.
from typing import Any, Callable, Dict
import warnings

from graphql import GraphQLField, GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLResolveInfo

from ..collection import BelongsTo, HasMany, ScalarAttribute, get_attribute_rules
from ..global_utils import capitalize_identity, get_record_value, is_absent, is_record
from ..schema import get_graphql_scalar_type
from .config import GRAPHQL_NAME_PATTERN
from .registry import SchemaRegistry, get_plural_query_field_name, get_singular_query_field_name


def resolve_belongs_to(
    registry: SchemaRegistry,
    parent_identity: str,
    attribute_name: str,
    rule: BelongsTo,
    parent: Any,
    info: GraphQLResolveInfo,
    **criteria: Any,
) -> Any:
    """Resolve the record referenced by a BelongsTo attribute of the parent record.

    Depending on whether the store populated the relation, the parent may hold the referenced
    record itself, or only its identifier. The identifier is taken from the first of these that
    is not absent (None or empty):
        - the primary key of the record stored under the attribute, if it holds a record;
        - the parent's value named like the referenced primary key, unless the parent collection
          declares an attribute of that name itself (then it is the parent's own identifier);
        - the bare value stored under the attribute.

    Returns:
        the result of the referenced collection's singular query field resolver, or None when the
        parent holds no identifier for the relation.
    """
    referenced_collection = registry.get_collection(rule.model)
    primary_key = referenced_collection.primary_key
    value = get_record_value(parent, attribute_name)

    identifier = None
    if is_record(value):
        identifier = get_record_value(value, primary_key)
    if is_absent(identifier) and primary_key not in registry.get_attribute_rules(parent_identity):
        identifier = get_record_value(parent, primary_key)
    if is_absent(identifier) and not is_record(value):
        identifier = value

    if is_absent(identifier):
        return None

    relation_criteria = dict(criteria)
    relation_criteria[primary_key] = identifier
    singular_field = registry.get_query_field(get_singular_query_field_name(rule.model))
    return singular_field.resolve(parent, info, **relation_criteria)


def resolve_has_many(
    registry: SchemaRegistry,
    parent_identity: str,
    rule: HasMany,
    parent: Any,
    info: GraphQLResolveInfo,
    **criteria: Any,
) -> Any:
    """Resolve the records of another collection whose "via" attribute points at the parent.

    Returns:
        the result of the referenced collection's plural query field resolver, or an empty list
        when the parent record has no primary key value.
    """
    parent_collection = registry.get_collection(parent_identity)
    primary_key_value = get_record_value(parent, parent_collection.primary_key)
    if primary_key_value is None:
        return []

    where = dict(criteria)
    where[rule.via.lower()] = primary_key_value
    plural_field = registry.get_query_field(get_plural_query_field_name(rule.collection))
    return plural_field.resolve(parent, info, where=where)


def _create_belongs_to_resolver(
    registry: SchemaRegistry, parent_identity: str, attribute_name: str, rule: BelongsTo
) -> Callable[..., Any]:
    """Return a resolver for a BelongsTo attribute, bound to the given registry."""

    def resolver(parent: Any, info: GraphQLResolveInfo, **criteria: Any) -> Any:
        return resolve_belongs_to(
            registry, parent_identity, attribute_name, rule, parent, info, **criteria
        )

    return resolver


def _create_has_many_resolver(
    registry: SchemaRegistry, parent_identity: str, rule: HasMany
) -> Callable[..., Any]:
    """Return a resolver for a HasMany attribute, bound to the given registry."""

    def resolver(parent: Any, info: GraphQLResolveInfo, **criteria: Any) -> Any:
        return resolve_has_many(registry, parent_identity, rule, parent, info, **criteria)

    return resolver


def _get_fields_for_collection(registry: SchemaRegistry, identity: str) -> Dict[str, GraphQLField]:
    """Return a dict from field name to GraphQL field, for the specified collection."""
    fields = {}
    for attribute_name, rule in registry.get_attribute_rules(identity).items():
        if isinstance(rule, BelongsTo):
            fields[attribute_name] = GraphQLField(
                registry.get_type(rule.model),
                resolve=_create_belongs_to_resolver(registry, identity, attribute_name, rule),
            )
        elif isinstance(rule, HasMany):
            fields[attribute_name] = GraphQLField(
                GraphQLList(registry.get_type(rule.collection)),
                resolve=_create_has_many_resolver(registry, identity, rule),
            )
        elif isinstance(rule, ScalarAttribute):
            scalar_type = get_graphql_scalar_type(rule.type)
            fields[attribute_name] = GraphQLField(
                GraphQLNonNull(scalar_type) if rule.required else scalar_type
            )
        else:
            raise AssertionError(
                "Unreachable code reached: unexpected attribute rule {} for attribute {} of "
                "collection {}.".format(rule, attribute_name, identity)
            )
    return fields


def _create_field_specification(
    registry: SchemaRegistry, identity: str
) -> Callable[[], Dict[str, GraphQLField]]:
    """Return a function that specifies the fields present on the given collection's type."""

    def field_maker_func() -> Dict[str, GraphQLField]:
        """Create and return the fields for the given GraphQL type."""
        return _get_fields_for_collection(registry, identity)

    return field_maker_func


def build_type(collection: Any, registry: SchemaRegistry) -> GraphQLObjectType:
    """Build the GraphQL output type of a collection and add it to the registry.

    Relation fields refer to the types and query fields of other collections, which may not be
    built yet. The fields are therefore only computed when graphql-core first asks for them,
    by which time the registry holds every type and query field of the schema.

    Args:
        collection: the collection whose type to build.
        registry: SchemaRegistry of the schema being generated.

    Returns:
        GraphQLObjectType named after the capitalized collection identity.
    """
    identity = collection.identity
    type_name = capitalize_identity(identity)

    attribute_rules = {}
    for attribute_name, rule in get_attribute_rules(collection).items():
        if GRAPHQL_NAME_PATTERN.match(attribute_name):
            attribute_rules[attribute_name] = rule
        else:
            warnings.warn(
                "Ignoring attribute {} of collection {} with invalid name. "
                "Attribute names must match /{}/.".format(
                    attribute_name, identity, GRAPHQL_NAME_PATTERN.pattern
                )
            )
    registry.attribute_rules[identity.lower()] = attribute_rules

    graphql_type = GraphQLObjectType(
        type_name,
        _create_field_specification(registry, identity),
        description="This represents a/an {}".format(type_name),
    )
    registry.register_type(identity, graphql_type)
    return graphql_type
