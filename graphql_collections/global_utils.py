# Copyright 2021-present Kensho Technologies, LLC.
from typing import Any, Dict, Mapping, TypeVar


KT = TypeVar("KT")
VT = TypeVar("VT")


def capitalize_identity(identity: str) -> str:
    """Return the GraphQL type name for a collection identity, e.g. "user" -> "User"."""
    return identity[:1].upper() + identity[1:].lower()


def get_record_value(record: Any, name: str) -> Any:
    """Return the named value of a record, which may be a mapping or a plain object."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name, None)
    return getattr(record, name, None)


def is_record(value: Any) -> bool:
    """Return True if the value looks like a (populated) record rather than a bare identifier."""
    if isinstance(value, Mapping):
        return True
    # Identifiers are builtin scalars, UUIDs, Decimals etc.: none of them carry a __dict__.
    return hasattr(value, "__dict__") and not isinstance(value, type)


def is_absent(value: Any) -> bool:
    """Return True if a filter value should be treated as not provided.

    None, empty strings and empty lists, tuples and dicts are absent. Numbers and booleans never
    are: 0 and False are meaningful filter values.
    """
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def prune_absent_values(filters: Mapping[KT, VT]) -> Dict[KT, VT]:
    """Return a copy of the filters without the values that are absent."""
    return {key: value for key, value in filters.items() if not is_absent(value)}
