# Copyright 2021-present Kensho Technologies, LLC.
from datetime import date, datetime, time, timezone
import operator
from typing import Any, Callable, Dict, List, Mapping, Optional

import arrow
from sqlalchemy import Column, Table, and_, func, or_, select, true
from sqlalchemy.engine import Engine
from sqlalchemy.sql.expression import ClauseElement, Select
import sqlalchemy.sql.sqltypes as sqltypes

from ..collection import AttributeRule, BelongsTo, Collection, Criteria
from ..exceptions import InvalidCriteriaError


OR_KEY = "or"

_COMPARISON_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "<": operator.lt,
    "lessThan": operator.lt,
    "<=": operator.le,
    "lessThanOrEqual": operator.le,
    ">": operator.gt,
    "greaterThan": operator.gt,
    ">=": operator.ge,
    "greaterThanOrEqual": operator.ge,
}

_STRING_OPERATORS: Dict[str, Callable[[Column, Any], ClauseElement]] = {
    "like": lambda column, value: column.like(value),
    "contains": lambda column, value: column.contains(value, autoescape=True),
    "startsWith": lambda column, value: column.startswith(value, autoescape=True),
    "endsWith": lambda column, value: column.endswith(value, autoescape=True),
}


def _coerce_value(column: Column, value: Any) -> Any:
    """Convert a filter value to what the column accepts.

    DateTime attributes are exposed as ISO-8601 strings, so string filter values are parsed back.
    Timezone-aware datetimes are compared with timezone-naive columns as UTC.
    """
    if isinstance(value, str) and isinstance(column.type, sqltypes.DateTime):
        try:
            value = arrow.get(value).datetime
        except (TypeError, ValueError) as e:
            raise InvalidCriteriaError(
                'Expected an ISO-8601 timestamp for attribute "{}", got {}: {}'.format(
                    column.key, repr(value), e
                )
            )
    if (
        isinstance(value, datetime)
        and value.tzinfo is not None
        and isinstance(column.type, sqltypes.DateTime)
        and not column.type.timezone
    ):
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _get_output_value(value: Any) -> Any:
    """Represent dates and times by their ISO-8601 string, as their attributes are strings."""
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    return value


def _get_equality_clause(column: Column, value: Any) -> ClauseElement:
    """Return the clause matching a plain filter value: equality, membership or IS NULL."""
    if value is None:
        return column.is_(None)
    elif isinstance(value, (list, tuple)):
        return column.in_([_coerce_value(column, element) for element in value])
    else:
        return column == _coerce_value(column, value)


def _get_operator_clause(column: Column, operator_name: str, value: Any) -> ClauseElement:
    """Return the clause for a single Waterline operator applied to a column."""
    if operator_name in _COMPARISON_OPERATORS:
        return _COMPARISON_OPERATORS[operator_name](column, _coerce_value(column, value))
    elif operator_name in _STRING_OPERATORS:
        return _STRING_OPERATORS[operator_name](column, value)
    elif operator_name == "in":
        return _get_equality_clause(column, list(value))
    elif operator_name in ("!", "not"):
        if value is None:
            return column.is_not(None)
        elif isinstance(value, (list, tuple)):
            return column.not_in([_coerce_value(column, element) for element in value])
        else:
            return column != _coerce_value(column, value)
    else:
        raise InvalidCriteriaError(
            'Unsupported operator "{}" used on attribute "{}".'.format(operator_name, column.key)
        )


class SQLAlchemyCollection(Collection):
    """A collection whose records are the rows of a SQLAlchemy Table.

    Rows are returned as dicts keyed by column key. When populating, BelongsTo attributes hold
    the referenced row instead of the foreign key value.
    """

    def __init__(
        self,
        identity: str,
        table: Table,
        engine: Engine,
        attributes: Mapping[str, AttributeRule],
        related_collections: Optional[Mapping[str, "SQLAlchemyCollection"]] = None,
    ) -> None:
        """Create a collection over the given table.

        Args:
            identity: str, the name of the collection.
            table: SQLAlchemy Table holding the records. Must have a single-column primary key.
            engine: SQLAlchemy Engine used to run the queries.
            attributes: dict, attribute name -> AttributeRule. BelongsTo attributes must be named
                        after the column holding the foreign key.
            related_collections: optional dict, lowercase identity -> SQLAlchemyCollection, used
                                 to populate BelongsTo attributes. May be filled in later.
        """
        self.identity = identity
        self.table = table
        self.engine = engine
        self.attributes = dict(attributes)
        self.primary_key = list(table.primary_key.columns)[0].key
        self.related_collections = (
            related_collections if related_collections is not None else {}
        )

    def _get_column(self, attribute_name: str) -> Column:
        """Return the column of the given attribute."""
        column = self.table.columns.get(attribute_name, None)
        if column is None:
            # Relation filters use the lowercased attribute name.
            column = next(
                (
                    candidate
                    for candidate in self.table.columns
                    if candidate.key.lower() == attribute_name.lower()
                ),
                None,
            )
        if column is None:
            raise InvalidCriteriaError(
                'Collection "{}" has no column for attribute "{}".'.format(
                    self.identity, attribute_name
                )
            )
        return column

    def _get_where_clause(self, where: Mapping[str, Any]) -> ClauseElement:
        """Return the SQL clause equivalent to a Waterline "where" dict."""
        clauses = []
        for attribute_name, value in where.items():
            if attribute_name == OR_KEY:
                clauses.append(or_(*[self._get_where_clause(alternative) for alternative in value]))
                continue

            column = self._get_column(attribute_name)
            if isinstance(value, Mapping):
                clauses.extend(
                    _get_operator_clause(column, operator_name, operand)
                    for operator_name, operand in value.items()
                )
            else:
                clauses.append(_get_equality_clause(column, value))

        if not clauses:
            return true()
        return and_(*clauses)

    def _apply_sort(self, statement: Select, sort: Optional[str]) -> Select:
        """Add the ORDER BY clauses described by a Waterline sort string."""
        if not sort:
            return statement

        for sort_component in sort.split(","):
            parts = sort_component.split()
            if not parts:
                continue
            if len(parts) > 2 or (len(parts) == 2 and parts[1].upper() not in ("ASC", "DESC")):
                raise InvalidCriteriaError('Could not understand sort string "{}".'.format(sort))

            column = self._get_column(parts[0])
            if len(parts) == 2 and parts[1].upper() == "DESC":
                statement = statement.order_by(column.desc())
            else:
                statement = statement.order_by(column.asc())
        return statement

    def _execute(self, statement: Select) -> List[Dict[str, Any]]:
        """Run the statement and return the resulting rows as dicts."""
        with self.engine.connect() as connection:
            return [
                {key: _get_output_value(value) for key, value in row._mapping.items()}
                for row in connection.execute(statement)
            ]

    def _populate(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace foreign key values of BelongsTo attributes by the referenced rows."""
        for attribute_name, rule in self.attributes.items():
            if not isinstance(rule, BelongsTo):
                continue
            referenced_collection = self.related_collections.get(rule.model.lower(), None)
            if referenced_collection is None:
                continue

            for record in records:
                foreign_key_value = record.get(attribute_name, None)
                if foreign_key_value is not None:
                    referenced_record = referenced_collection.find_one(
                        Criteria(
                            where={referenced_collection.primary_key: foreign_key_value},
                            populate=False,
                        )
                    )
                    if referenced_record is not None:
                        record[attribute_name] = referenced_record
        return records

    def find(self, criteria: Criteria) -> List[Dict[str, Any]]:
        """Return the rows matching the criteria."""
        statement = select(self.table).where(self._get_where_clause(criteria.where))
        statement = self._apply_sort(statement, criteria.sort)
        if criteria.limit is not None:
            statement = statement.limit(criteria.limit)
        if criteria.skip:
            statement = statement.offset(criteria.skip)

        records = self._execute(statement)
        if criteria.populate:
            records = self._populate(records)
        return records

    def find_one(self, criteria: Criteria) -> Optional[Dict[str, Any]]:
        """Return the first row matching the criteria, or None."""
        records = self.find(
            Criteria(where=criteria.where, sort=criteria.sort, limit=1, populate=criteria.populate)
        )
        if not records:
            return None
        return records[0]

    def count(self, criteria: Criteria) -> int:
        """Return the number of rows matching the criteria."""
        statement = (
            select(func.count())
            .select_from(self.table)
            .where(self._get_where_clause(criteria.where))
        )
        with self.engine.connect() as connection:
            return connection.execute(statement).scalar_one()
