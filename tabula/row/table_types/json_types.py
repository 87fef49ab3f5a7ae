##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Table types for structured values stored as JSON text.
"""

import json
from types import SimpleNamespace
from typing import Any

from tabula.exceptions import DecodeError
from tabula.row.table_types.table_type import TableType


def _namespace_default(value: Any) -> Any:
    """
    `json.dumps` fallback that encodes SimpleNamespace objects as JSON objects.

    Args:
        value: The value the JSON encoder could not serialize.

    Returns:
        A JSON-serializable version of `value`.

    Raises:
        TypeError: If `value` is not a SimpleNamespace.
    """
    if isinstance(value, SimpleNamespace):
        return vars(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonType(TableType):
    """
    Table type for generic JSON documents stored as strings.

    When `associative` is True, JSON objects decode to dictionaries. When it is
    False, they decode to SimpleNamespace objects with attribute access.

    Attributes:
        size (int): Maximum storage string size.
        associative (bool): Whether JSON objects decode to dicts.
    """

    def __init__(self, size: int = 16384, sql_type: str = "VARCHAR", associative: bool = True):
        """
        Construct a JSON table type with a string-based storage definition.

        Args:
            size: Maximum storage string size.
            sql_type: Storage base type.
            associative: Decode JSON objects as dicts (True) or SimpleNamespace objects (False).
        """
        self.size: int = size
        self.associative: bool = associative
        super().__init__(f"{sql_type}({size})", "dict" if associative else "SimpleNamespace")

    def _to_domain(self, storage_value: Any) -> Any:
        object_hook = None if self.associative else lambda obj: SimpleNamespace(**obj)
        try:
            return json.loads(storage_value, object_hook=object_hook)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Cannot decode {storage_value!r} as JSON: {exc}") from exc

    def _to_storage(self, domain_value: Any) -> str:
        return json.dumps(domain_value, default=_namespace_default)


class ArrayType(JsonType):
    """
    Table type storing lists as JSON strings. Decoding is always associative.
    """

    def __init__(self, size: int = 4096, sql_type: str = "VARCHAR"):
        """
        Construct an array table type with a string-based storage definition.

        Args:
            size: Maximum storage string size.
            sql_type: Storage base type.
        """
        super().__init__(size=size, sql_type=sql_type, associative=True)
        self._domain_type = "list"
