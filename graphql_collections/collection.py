# Copyright 2021-present Kensho Technologies, LLC.
"""Data-model definitions consumed by the schema generator.

A collection is a named set of records with typed attributes, stored somewhere that can answer
find_one / find / count requests. The schema generator only reads collection metadata; every
read of actual data is delegated to the collection's own operations.

Attribute metadata follows the shape of Waterline models: a plain attribute has a type tag and
optional required / unique / primaryKey flags, a "model" attribute points at a single record of
another collection, and a "collection" attribute with "via" is the inverse side of such a
pointer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ScalarAttribute:
    """A plain attribute holding a value of one of the supported type tags."""

    type: str = "string"
    required: bool = False
    unique: bool = False
    primary_key: bool = False

    @property
    def is_identifying(self) -> bool:
        """Return True if the attribute can be used to look up a single record."""
        return self.primary_key or self.unique


@dataclass(frozen=True)
class BelongsTo:
    """An attribute that holds a foreign identifier into the collection named by "model"."""

    model: str


@dataclass(frozen=True)
class HasMany:
    """Inverse side of a BelongsTo: records of "collection" whose "via" attribute points here."""

    collection: str
    via: str


AttributeRule = Union[ScalarAttribute, BelongsTo, HasMany]


def attribute_rule_from_dict(rules: Mapping[str, Any]) -> AttributeRule:
    """Convert Waterline-style attribute metadata into an attribute rule.

    Args:
        rules: dict, for example {"type": "string", "required": True}, {"model": "user"} or
               {"collection": "article", "via": "author"}.

    Returns:
        ScalarAttribute, BelongsTo or HasMany object equivalent to the given metadata.
    """
    if "model" in rules:
        return BelongsTo(rules["model"])
    elif "collection" in rules:
        if not rules.get("via"):
            raise ConfigurationError(
                'Attribute rules {} name collection "{}" but do not specify "via".'.format(
                    rules, rules["collection"]
                )
            )
        return HasMany(rules["collection"], rules["via"])
    else:
        return ScalarAttribute(
            type=rules.get("type") or "string",
            required=bool(rules.get("required", False)),
            unique=bool(rules.get("unique", False)),
            primary_key=bool(rules.get("primaryKey", rules.get("primary_key", False))),
        )


def get_attribute_rules(collection: Any) -> Dict[str, AttributeRule]:
    """Return the collection's attributes as an ordered dict of attribute name -> rule."""
    result: Dict[str, AttributeRule] = {}
    for attribute_name, rules in collection.attributes.items():
        if isinstance(rules, (ScalarAttribute, BelongsTo, HasMany)):
            result[attribute_name] = rules
        elif isinstance(rules, Mapping):
            result[attribute_name] = attribute_rule_from_dict(rules)
        else:
            raise ConfigurationError(
                'Attribute "{}" of collection "{}" has unrecognized rules {} of type {}.'.format(
                    attribute_name, collection.identity, rules, type(rules).__name__
                )
            )
    return result


@dataclass(frozen=True)
class Criteria:
    """The request handed to a collection's find_one, find and count operations.

    Attributes:
        where: dict, attribute name -> value, list of values, or Waterline operator dict such as
               {">": 5}. An "or" key may hold a list of such dicts.
        limit: optional int, maximum number of records to return.
        skip: optional int, number of records to skip.
        sort: optional Waterline sort string, for example "createdAt DESC, name ASC".
        populate: bool, whether relations should be populated when the store is able to.
    """

    where: Dict[str, Any] = field(default_factory=dict)
    limit: Optional[int] = None
    skip: Optional[int] = None
    sort: Optional[str] = None
    populate: bool = True


class Collection(ABC):
    """Base class for collections. Any object exposing the same members can be used instead."""

    identity: str
    primary_key: str
    attributes: Mapping[str, Union[AttributeRule, Mapping[str, Any]]]

    @abstractmethod
    def find_one(self, criteria: Criteria) -> Any:
        """Return the single record matching the criteria, or None. May return an awaitable."""

    @abstractmethod
    def find(self, criteria: Criteria) -> Any:
        """Return the list of records matching the criteria. May return an awaitable."""

    @abstractmethod
    def count(self, criteria: Criteria) -> Any:
        """Return the number of records matching the criteria. May return an awaitable."""
