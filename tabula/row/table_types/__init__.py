##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `table_types` package holds the adapters that convert column values
between their storage representation and their domain (Python) value.

Modules:
    table_type.py: Defines the [`TableType`][row.table_types.table_type.TableType]
        abstract base class.
    scalar_types.py: Integer, string, boolean, datetime and passthrough types.
    json_types.py: JSON document and JSON array types.
"""

from tabula.row.table_types.json_types import ArrayType, JsonType
from tabula.row.table_types.scalar_types import BooleanType, DateTimeType, IntegerType, SqlType, StringType
from tabula.row.table_types.table_type import TableType


__all__ = [
    "ArrayType",
    "BooleanType",
    "DateTimeType",
    "IntegerType",
    "JsonType",
    "SqlType",
    "StringType",
    "TableType",
]
