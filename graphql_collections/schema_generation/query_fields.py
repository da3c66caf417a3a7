# Copyright 2021-present Kensho Technologies, LLC.
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import warnings

import arrow
from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLResolveInfo,
    GraphQLString,
)

from ..collection import Criteria, ScalarAttribute
from ..exceptions import InvalidCriteriaError, InvalidTimestampArgument
from ..global_utils import capitalize_identity, is_absent, prune_absent_values
from ..schema import GraphQLJSON, get_graphql_scalar_type
from .config import SchemaGenerationConfig
from .registry import SchemaRegistry, get_plural_query_field_name, get_singular_query_field_name


PAGINATION_ARGUMENT_NAMES = frozenset({"limit", "skip", "sort"})
WHERE_ARGUMENT_NAME = "where"
TIMESTAMP_RANGE_ARGUMENT_NAMES = frozenset({"start", "end"})
COUNT_ARGUMENT_NAME = "count"


def get_reserved_argument_names(config: SchemaGenerationConfig) -> frozenset:
    """Return the argument names of plural query fields that attributes may not reuse."""
    reserved_names = PAGINATION_ARGUMENT_NAMES.union({WHERE_ARGUMENT_NAME})
    if config.expose_aggregate_fields:
        reserved_names = reserved_names.union(TIMESTAMP_RANGE_ARGUMENT_NAMES)
    return reserved_names


def _parse_timestamp(argument_name: str, value: str) -> Any:
    """Parse an ISO-8601 timestamp argument into a timezone-aware UTC datetime."""
    try:
        return arrow.get(value).to("utc").datetime
    except (TypeError, ValueError) as e:
        raise InvalidTimestampArgument(
            'Expected argument "{}" to be an ISO-8601 timestamp, got {}: {}'.format(
                argument_name, repr(value), e
            )
        )


def _get_timestamp_range_filter(
    config: SchemaGenerationConfig, start: Optional[str], end: Optional[str]
) -> Dict[str, Any]:
    """Return the "where" entries restricting the timestamp attribute to (start, end)."""
    bounds = {}
    if start:
        bounds[">"] = _parse_timestamp("start", start)
    if end:
        bounds["<"] = _parse_timestamp("end", end)

    if not bounds:
        return {}
    return {config.timestamp_attribute: bounds}


def _get_where(
    config: SchemaGenerationConfig, arguments: Dict[str, Any]
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split resolver arguments into the "where" filter and the remaining arguments.

    The raw "where" argument, the individual attribute filters and the timestamp range are
    merged into a single filter. Absent values are dropped.

    Returns:
        tuple (where dict, dict of the arguments that are not filters)
    """
    arguments = dict(arguments)
    raw_where = arguments.pop(WHERE_ARGUMENT_NAME, None)
    if is_absent(raw_where):
        where = {}
    elif isinstance(raw_where, Mapping):
        where = dict(raw_where)
    else:
        raise InvalidCriteriaError(
            'Expected argument "{}" to be an object of filters, got {}.'.format(
                WHERE_ARGUMENT_NAME, repr(raw_where)
            )
        )
    options = {
        name: arguments.pop(name) for name in PAGINATION_ARGUMENT_NAMES if name in arguments
    }

    timestamp_range = {}
    if config.expose_aggregate_fields:
        start = arguments.pop("start", None)
        end = arguments.pop("end", None)
        timestamp_range = _get_timestamp_range_filter(config, start, end)

    where.update(arguments)
    where = prune_absent_values(where)
    for attribute_name, bounds in timestamp_range.items():
        existing_filter = where.get(attribute_name, None)
        if isinstance(existing_filter, dict):
            where[attribute_name] = dict(existing_filter, **bounds)
        else:
            where[attribute_name] = bounds
    return where, options


def resolve_find_one(
    collection: Any, parent: Any, info: GraphQLResolveInfo, **arguments: Any
) -> Any:
    """Return the single record of the collection matching the identifying arguments.

    Without any identifying value there is no record to look up, so the store is not called.
    """
    where = prune_absent_values(arguments)
    if not where:
        return None
    return collection.find_one(Criteria(where=where))


def resolve_find(
    config: SchemaGenerationConfig,
    collection: Any,
    parent: Any,
    info: GraphQLResolveInfo,
    **arguments: Any,
) -> Any:
    """Return the records of the collection matching the filter and pagination arguments."""
    where, options = _get_where(config, arguments)
    return collection.find(
        Criteria(
            where=where,
            limit=options.get("limit", None),
            skip=options.get("skip", None),
            sort=options.get("sort", None) or None,
        )
    )


def resolve_find_by_timestamp(
    config: SchemaGenerationConfig,
    collection: Any,
    direction: str,
    parent: Any,
    info: GraphQLResolveInfo,
    **arguments: Any,
) -> Any:
    """Return the first "count" records of the collection, ordered by the timestamp attribute."""
    limit = arguments.pop(COUNT_ARGUMENT_NAME)
    where, _ = _get_where(config, arguments)
    return collection.find(
        Criteria(
            where=where,
            limit=limit,
            sort="{} {}".format(config.timestamp_attribute, direction),
        )
    )


def resolve_count(
    config: SchemaGenerationConfig,
    collection: Any,
    parent: Any,
    info: GraphQLResolveInfo,
    **arguments: Any,
) -> Any:
    """Return the number of records of the collection within the timestamp range."""
    where, _ = _get_where(config, arguments)
    return collection.count(Criteria(where=where, populate=False))


def _bind_resolver(resolve_func: Callable[..., Any], *bound_args: Any) -> Callable[..., Any]:
    """Return a GraphQL resolver calling resolve_func with the bound arguments first."""

    def resolver(parent: Any, info: GraphQLResolveInfo, **arguments: Any) -> Any:
        return resolve_func(*bound_args, parent, info, **arguments)

    return resolver


def _get_query_arguments(
    collection: Any, registry: SchemaRegistry, config: SchemaGenerationConfig
) -> Tuple[Dict[str, GraphQLArgument], Dict[str, GraphQLArgument]]:
    """Partition the scalar attributes of a collection into find-one and find-many arguments.

    Primary key and unique attributes identify a single record and become arguments of the
    singular query field. Every other scalar attribute becomes a filter argument of the plural
    query field, unless its name clashes with one of the built-in plural field arguments.

    Returns:
        tuple (identifying arguments dict, filter arguments dict), each in declaration order.
    """
    identity = collection.identity
    reserved_names = get_reserved_argument_names(config)
    find_one_args = {}
    find_many_args = {}

    for attribute_name, rule in registry.get_attribute_rules(identity).items():
        if not isinstance(rule, ScalarAttribute):
            continue

        argument = GraphQLArgument(get_graphql_scalar_type(rule.type))
        if rule.is_identifying:
            find_one_args[attribute_name] = argument
        elif attribute_name in reserved_names:
            warnings.warn(
                "Field '{}.{}' will not be individually queryable, since its name clashes with "
                "a built-in argument. Use 'where' instead.".format(
                    get_singular_query_field_name(identity), attribute_name
                )
            )
        else:
            find_many_args[attribute_name] = argument

    return find_one_args, find_many_args


def _get_timestamp_range_arguments() -> Dict[str, GraphQLArgument]:
    """Return the "start" and "end" arguments of the non-singular query fields."""
    return {
        "start": GraphQLArgument(
            GraphQLString, description="Only include records created after this timestamp."
        ),
        "end": GraphQLArgument(
            GraphQLString, description="Only include records created before this timestamp."
        ),
    }


def _get_aggregate_query_fields(
    collection: Any, registry: SchemaRegistry, config: SchemaGenerationConfig
) -> Dict[str, GraphQLField]:
    """Return the getLatestXs, getFirstXs and countXs query fields of a collection."""
    identity = collection.identity
    type_name = capitalize_identity(identity)
    graphql_type = registry.get_type(identity)

    def count_and_range_args() -> Dict[str, GraphQLArgument]:
        arguments = {COUNT_ARGUMENT_NAME: GraphQLArgument(GraphQLNonNull(GraphQLInt))}
        arguments.update(_get_timestamp_range_arguments())
        return arguments

    return {
        "getLatest{}s".format(type_name): GraphQLField(
            GraphQLList(graphql_type),
            args=count_and_range_args(),
            resolve=_bind_resolver(resolve_find_by_timestamp, config, collection, "DESC"),
            description="The most recently created records of {}.".format(type_name),
        ),
        "getFirst{}s".format(type_name): GraphQLField(
            GraphQLList(graphql_type),
            args=count_and_range_args(),
            resolve=_bind_resolver(resolve_find_by_timestamp, config, collection, "ASC"),
            description="The earliest created records of {}.".format(type_name),
        ),
        "count{}s".format(type_name): GraphQLField(
            GraphQLInt,
            args=_get_timestamp_range_arguments(),
            resolve=_bind_resolver(resolve_count, config, collection),
            description="The number of records of {}.".format(type_name),
        ),
    }


def build_query_fields(
    collection: Any, registry: SchemaRegistry, config: SchemaGenerationConfig
) -> Dict[str, GraphQLField]:
    """Build the query fields of a collection and add them to the registry.

    Args:
        collection: the collection whose query fields to build. Its type must already be built.
        registry: SchemaRegistry of the schema being generated.
        config: SchemaGenerationConfig of the schema being generated.

    Returns:
        dict, query field name -> GraphQLField, the fields that were added to the registry.
    """
    identity = collection.identity
    graphql_type = registry.get_type(identity)
    find_one_args, filter_args = _get_query_arguments(collection, registry, config)

    find_many_args = {
        "limit": GraphQLArgument(GraphQLInt),
        "skip": GraphQLArgument(GraphQLInt),
        "sort": GraphQLArgument(GraphQLString),
    }
    find_many_args.update(filter_args)
    if config.expose_query_language:
        # Allows use of the store's query language, e.g. {name: {contains: "am"}}.
        find_many_args[WHERE_ARGUMENT_NAME] = GraphQLArgument(GraphQLJSON)
    if config.expose_aggregate_fields:
        find_many_args.update(_get_timestamp_range_arguments())

    fields = {
        get_singular_query_field_name(identity): GraphQLField(
            graphql_type,
            args=find_one_args,
            resolve=_bind_resolver(resolve_find_one, collection),
        ),
        get_plural_query_field_name(identity): GraphQLField(
            GraphQLList(graphql_type),
            args=find_many_args,
            resolve=_bind_resolver(resolve_find, config, collection),
        ),
    }
    if config.expose_aggregate_fields:
        fields.update(_get_aggregate_query_fields(collection, registry, config))

    registry.register_query_fields(fields)
    return fields
