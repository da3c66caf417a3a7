# Copyright 2021-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
import re
from typing import Any, Dict, Mapping, Sequence, Tuple

from ..exceptions import ConfigurationError


# Valid GraphQL names, see https://spec.graphql.org/June2018/#Name. Names starting with "__"
# are reserved for introspection.
GRAPHQL_NAME_PATTERN = re.compile(r"^(?!__)[_a-zA-Z][_a-zA-Z0-9]*$")

_COLLECTION_MEMBERS = ("identity", "primary_key", "attributes", "find_one", "find")
_AGGREGATE_COLLECTION_MEMBERS = ("count",)


def _get_collection_sequence(collections: Any) -> Tuple[Any, ...]:
    """Return the collections as a tuple, accepting either a mapping or a sequence of them."""
    if isinstance(collections, Mapping):
        return tuple(collections.values())
    elif isinstance(collections, Sequence) and not isinstance(collections, (str, bytes)):
        return tuple(collections)
    else:
        raise ConfigurationError(
            "Expected collections to be a mapping or a sequence of collections, "
            "got {} of type {}.".format(collections, type(collections).__name__)
        )


@dataclass(frozen=True)
class SchemaGenerationConfig:
    """Validated, immutable options for a single schema generation.

    Attributes:
        collections: tuple of collections, in the order in which they were provided.
        expose_query_language: bool, whether plural query fields accept a raw "where" argument
                               of the JSON scalar type.
        expose_aggregate_fields: bool, whether to add the getLatestXs, getFirstXs and countXs
                                 query fields, and the "start" / "end" timestamp range arguments.
        timestamp_attribute: str, the attribute that getLatestXs, getFirstXs, "start" and "end"
                             operate on.
    """

    collections: Tuple[Any, ...]
    expose_query_language: bool = False
    expose_aggregate_fields: bool = False
    timestamp_attribute: str = "createdAt"
    collections_by_identity: Dict[str, Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the options and index the collections by identity."""
        collections = _get_collection_sequence(self.collections)
        if not collections:
            raise ConfigurationError("Expected at least one collection, but none were provided.")

        for option_name in ("expose_query_language", "expose_aggregate_fields"):
            option_value = getattr(self, option_name)
            if not isinstance(option_value, bool):
                raise ConfigurationError(
                    'Expected option "{}" to be a bool, got {} of type {}.'.format(
                        option_name, option_value, type(option_value).__name__
                    )
                )
        if not isinstance(self.timestamp_attribute, str) or not self.timestamp_attribute:
            raise ConfigurationError(
                'Expected option "timestamp_attribute" to be a non-empty string, got {}.'.format(
                    self.timestamp_attribute
                )
            )

        required_members = _COLLECTION_MEMBERS
        if self.expose_aggregate_fields:
            required_members += _AGGREGATE_COLLECTION_MEMBERS

        collections_by_identity: Dict[str, Any] = {}
        for collection in collections:
            missing_members = [
                member for member in required_members if not hasattr(collection, member)
            ]
            if missing_members:
                raise ConfigurationError(
                    "Object {} cannot be used as a collection, it is missing: {}".format(
                        collection, missing_members
                    )
                )

            identity = collection.identity
            if not isinstance(identity, str) or not GRAPHQL_NAME_PATTERN.match(identity):
                raise ConfigurationError(
                    "Collection identity {} is not a valid GraphQL name. Identities must match "
                    "/{}/.".format(repr(identity), GRAPHQL_NAME_PATTERN.pattern)
                )

            identity_key = identity.lower()
            if identity_key in collections_by_identity:
                raise ConfigurationError(
                    'Found more than one collection with identity "{}".'.format(identity)
                )
            collections_by_identity[identity_key] = collection

        object.__setattr__(self, "collections", collections)
        object.__setattr__(self, "collections_by_identity", collections_by_identity)
