##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Utility functions shared by the storage executors.

These cover quoting identifiers for SQL statements, encoding storage rows into
flat string hashes (and back), and computing the key string of a stored row.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from tabula.row.attributes import Table
from tabula.utils import join_primary_string


LOG = logging.getLogger(__name__)


def quote_identifier(identifier: str) -> str:
    """
    Quote a table, column or index name for use in a SQL statement.

    Args:
        identifier: The name to quote.

    Returns:
        The name wrapped in double quotes, inner double quotes doubled.
    """
    return '"' + identifier.replace('"', '""') + '"'


def serialize_row(row: Mapping[str, Any]) -> Dict[str, str]:
    """
    Encode every value of a storage row as a JSON string.

    Args:
        row: A mapping of column name to storage value.

    Returns:
        A dict of column name to JSON text, suitable for a flat string hash.
    """
    return {column: json.dumps(value) for column, value in row.items()}


def deserialize_row(data: Mapping[Union[str, bytes], Union[str, bytes]]) -> Dict[str, Any]:
    """
    Decode a flat string hash written by `serialize_row`.

    Values that are not valid JSON are kept as plain strings.

    Args:
        data: The hash as read from storage.

    Returns:
        A dict of column name to storage value.
    """
    deserialized = {}
    for key, val in data.items():
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        if isinstance(val, bytes):
            val = val.decode("utf-8")
        try:
            deserialized[key] = json.loads(val)
        except json.JSONDecodeError:
            LOG.warning(f"Value of column '{key}' is not JSON encoded. Keeping the raw string '{val}'.")
            deserialized[key] = val
    return deserialized


def row_key(table: Table, row: Mapping[str, Any]) -> str:
    """
    Compute the key string of a row from its primary key values.

    Args:
        table: The resolved table of the row.
        row: A mapping of column name to storage value.

    Returns:
        The primary key values of the row joined into one primary string.
    """
    return join_primary_string(row.get(column) for column in table.primary_keys)


def project_row(row: Mapping[str, Any], columns: Optional[Union[str, Iterable[str]]] = None) -> Dict[str, Any]:
    """
    Keep only some columns of a row.

    Args:
        row: A mapping of column name to storage value.
        columns: A column name, a list of column names, or None for every column.

    Returns:
        A new dict holding the selected columns, in the requested order.
    """
    if columns is None:
        return dict(row)
    if isinstance(columns, str):
        columns = [columns]
    selected: List[str] = list(columns)
    return {column: row.get(column) for column in selected}
