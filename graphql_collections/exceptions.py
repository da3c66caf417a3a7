# Copyright 2021-present Kensho Technologies, LLC.
class GraphQLCollectionsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(GraphQLCollectionsError):
    """Raised when the schema generation options are invalid.

    Possible reasons include:
        - no collections were provided, or the collections value is of the wrong type;
        - an option was given a value of the wrong type;
        - two collections share the same identity;
        - an attribute rule could not be understood.

    A schema is never partially built: the error is raised before any schema object is returned.
    """


class UnknownCollectionReference(ConfigurationError):
    """Raised when a relation attribute names a collection absent from the input set."""


class MissingPrimaryKeyError(ConfigurationError):
    """Raised when a SQLAlchemy Table object used as a collection has no primary key."""


class UnsupportedLiteralKind(GraphQLCollectionsError):
    """Raised when a JSON literal contains a syntax node kind that has no native conversion.

    This only fails the execution of the query containing the literal, never the schema.
    """


class InvalidTimestampArgument(GraphQLCollectionsError):
    """Raised when a "start" or "end" argument is not an ISO-8601 timestamp."""


class UnsupportedOperationError(GraphQLCollectionsError):
    """Raised when requesting functionality that is not supported, such as mutations."""


class InvalidCriteriaError(GraphQLCollectionsError):
    """Raised when a store can not evaluate the given criteria.

    For example, the criteria may filter on an attribute the collection does not have, or use
    an operator the store does not understand. Only the query field being resolved fails.
    """
