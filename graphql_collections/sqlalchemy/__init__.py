# Copyright 2021-present Kensho Technologies, LLC.
from typing import Dict, Mapping, Optional

from sqlalchemy import Table
from sqlalchemy.engine import Engine

from ..collection import AttributeRule, BelongsTo, HasMany, ScalarAttribute
from ..exceptions import ConfigurationError
from .collection import SQLAlchemyCollection
from .scalar_type_mapper import try_get_type_tag
from .utils import (
    validate_that_tables_belong_to_the_same_metadata_object,
    validate_that_tables_have_primary_keys,
)


def _get_attributes_from_table(
    table: Table, table_to_identity: Mapping[Table, str]
) -> Dict[str, AttributeRule]:
    """Return the attribute rules corresponding to the columns of the table.

    A column with a single foreign key to another table of the set becomes a BelongsTo attribute.
    Columns with unsupported types are ignored.
    """
    attributes: Dict[str, AttributeRule] = {}
    for column in table.columns:
        foreign_keys = list(column.foreign_keys)
        if len(foreign_keys) == 1 and foreign_keys[0].column.table in table_to_identity:
            attributes[column.key] = BelongsTo(table_to_identity[foreign_keys[0].column.table])
            continue

        type_tag = try_get_type_tag(column.key, column.type)
        if type_tag is not None:
            attributes[column.key] = ScalarAttribute(
                type=type_tag,
                required=not column.nullable,
                unique=bool(column.unique),
                primary_key=column.primary_key,
            )
    return attributes


def get_collections_from_sqlalchemy_metadata(
    identity_to_table: Mapping[str, Table],
    engine: Engine,
    has_many: Optional[Mapping[str, Mapping[str, HasMany]]] = None,
) -> Dict[str, SQLAlchemyCollection]:
    """Return collections backed by the given SQLAlchemy tables.

    Args:
        identity_to_table: dict, str -> SQLAlchemy Table. Each table becomes a collection whose
                           identity is the dictionary key. The attributes of the collection
                           are inferred from the columns of the table: columns with unsupported
                           types are ignored, and columns with a foreign key to another table
                           of the dict become BelongsTo attributes.
        engine: SQLAlchemy Engine on which the collections run their queries.
        has_many: optional dict, identity -> {attribute name -> HasMany}, the inverse sides of
                  foreign keys that should be exposed as list fields. SQL tables have no such
                  columns, so they have to be declared explicitly.

    Returns:
        dict, identity -> SQLAlchemyCollection, suitable for get_graphql_schema().
    """
    if has_many is None:
        has_many = {}

    validate_that_tables_belong_to_the_same_metadata_object(identity_to_table.values())
    validate_that_tables_have_primary_keys(identity_to_table.values())

    unknown_identities = set(has_many).difference(identity_to_table)
    if unknown_identities:
        raise ConfigurationError(
            "HasMany attributes were given for unknown collections {}.".format(
                sorted(unknown_identities)
            )
        )

    table_to_identity = {table: identity for identity, table in identity_to_table.items()}
    related_collections: Dict[str, SQLAlchemyCollection] = {}
    collections = {}
    for identity, table in identity_to_table.items():
        attributes = _get_attributes_from_table(table, table_to_identity)
        for attribute_name, rule in has_many.get(identity, {}).items():
            if attribute_name in attributes:
                raise ConfigurationError(
                    'HasMany attribute "{}" of collection "{}" clashes with a column of the '
                    "same name.".format(attribute_name, identity)
                )
            attributes[attribute_name] = rule

        collection = SQLAlchemyCollection(identity, table, engine, attributes, related_collections)
        related_collections[identity.lower()] = collection
        collections[identity] = collection

    return collections
