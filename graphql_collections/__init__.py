# Copyright 2021-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from .collection import (  # noqa
    BelongsTo,
    Collection,
    Criteria,
    HasMany,
    ScalarAttribute,
    attribute_rule_from_dict,
)
from .exceptions import (  # noqa
    ConfigurationError,
    GraphQLCollectionsError,
    InvalidCriteriaError,
    InvalidTimestampArgument,
    MissingPrimaryKeyError,
    UnknownCollectionReference,
    UnsupportedLiteralKind,
    UnsupportedOperationError,
)
from .schema import GraphQLJSON, get_graphql_scalar_type  # noqa
from .schema.literal_parsing import parse_json_literal  # noqa
from .schema_generation import get_graphql_schema, get_mutations  # noqa


__package_name__ = "graphql-collections"
__version__ = "1.0.0"
