# Copyright 2021-present Kensho Technologies, LLC.
from typing import Optional
import warnings

import sqlalchemy.sql.sqltypes as sqltypes
from sqlalchemy.sql.type_api import TypeEngine

from ..schema import (
    BOOLEAN_TYPE_TAG,
    FLOAT_TYPE_TAG,
    INTEGER_TYPE_TAG,
    JSON_TYPE_TAG,
    STRING_TYPE_TAG,
)


# Checked in order with isinstance(), so subclasses such as BigInteger, Text or Enum are covered
# by their generic base class.
GENERIC_SQL_CLASS_TO_TYPE_TAG = (
    (sqltypes.Boolean, BOOLEAN_TYPE_TAG),
    (sqltypes.Integer, INTEGER_TYPE_TAG),
    (sqltypes.Float, FLOAT_TYPE_TAG),
    (sqltypes.Numeric, FLOAT_TYPE_TAG),
    (sqltypes.JSON, JSON_TYPE_TAG),
    (sqltypes.String, STRING_TYPE_TAG),
    # Dates and times are exposed as their string representation.
    (sqltypes.DateTime, STRING_TYPE_TAG),
    (sqltypes.Date, STRING_TYPE_TAG),
    (sqltypes.Time, STRING_TYPE_TAG),
)

# We do not currently plan to add a mapping for binary objects.
UNSUPPORTED_GENERIC_SQL_TYPES = (
    sqltypes.ARRAY,
    sqltypes.Interval,
    sqltypes.LargeBinary,
    sqltypes.PickleType,
)


def try_get_type_tag(column_name: str, column_type: TypeEngine) -> Optional[str]:
    """Return the attribute type tag for the SQL datatype or None if none is found."""
    if not isinstance(column_type, UNSUPPORTED_GENERIC_SQL_TYPES):
        for sql_class, type_tag in GENERIC_SQL_CLASS_TO_TYPE_TAG:
            if isinstance(column_type, sql_class):
                return type_tag

    # We were not able to deduce an appropriate type tag for this column.
    warnings.warn(
        'Ignoring column "{}" with unsupported SQL datatype: {}'.format(
            column_name, type(column_type).__name__
        )
    )
    return None
