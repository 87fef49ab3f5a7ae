##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Table types for scalar values: integers, strings, booleans, datetimes and
plain storage-typed strings.
"""

from datetime import datetime
from typing import Any

from tabula.exceptions import DecodeError
from tabula.row.table_types.table_type import TableType


class IntegerType(TableType):
    """
    Table type for integer values stored in INTEGER(n) columns.

    Attributes:
        size (int): Size hint for the storage INTEGER definition.
    """

    def __init__(self, size: int = 10):
        """
        Create an integer type with a given display size.

        Args:
            size: Size hint for the storage definition (e.g. 10 -> "INTEGER(10)").
        """
        self.size: int = size
        super().__init__(f"INTEGER({size})", "int")

    def _to_domain(self, storage_value: Any) -> int:
        try:
            return int(storage_value)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Cannot decode {storage_value!r} as an integer.") from exc

    def _to_storage(self, domain_value: Any) -> int:
        return int(domain_value)


class StringType(TableType):
    """
    Table type for variable-length strings (e.g. VARCHAR(n)).

    Attributes:
        size (int): Maximum string length of the storage column.
    """

    def __init__(self, size: int = 255, sql_type: str = "VARCHAR"):
        """
        Create a string type with the given length and storage base type.

        Args:
            size: Maximum string length for the storage column.
            sql_type: Storage base type to use.
        """
        self.size: int = size
        super().__init__(f"{sql_type}({size})", "str")

    def _to_domain(self, storage_value: Any) -> str:
        if isinstance(storage_value, bytes):
            return storage_value.decode("utf-8")
        return str(storage_value)

    def _to_storage(self, domain_value: Any) -> str:
        return str(domain_value)


class SqlType(TableType):
    """
    Generic string-backed storage type passthrough.

    Useful when a column needs a specific storage type while the domain value
    stays a string.
    """

    def __init__(self, sql_type: str = "VARCHAR"):
        super().__init__(sql_type, "str")

    def _to_domain(self, storage_value: Any) -> str:
        return str(storage_value)

    def _to_storage(self, domain_value: Any) -> str:
        return str(domain_value)


class BooleanType(TableType):
    """
    Table type for boolean values stored as configurable true/false tokens.

    By default True is stored as "1" and False as "0" in an INTEGER(1) column.
    Values read from storage are compared by their string form, so the integer
    1 read back from a database matches the "1" token.
    """

    def __init__(self, sql_type: str = "INTEGER(1)", true_token: str = "1", false_token: str = "0"):
        """
        Configure the storage type and the tokens representing booleans.

        Args:
            sql_type: Storage type to use.
            true_token: Token stored for True.
            false_token: Token stored for False.
        """
        self.true_token: str = true_token
        self.false_token: str = false_token
        super().__init__(sql_type, "bool")

    def _to_domain(self, storage_value: Any) -> bool:
        token = str(storage_value)
        if token == self.true_token:
            return True
        if token == self.false_token:
            return False
        raise DecodeError(
            f"Cannot decode {storage_value!r} as a boolean "
            f"(expected '{self.true_token}' or '{self.false_token}')."
        )

    def _to_storage(self, domain_value: Any) -> str:
        return self.true_token if domain_value else self.false_token


class DateTimeType(TableType):
    """
    Table type for datetimes stored as ISO 8601 text.
    """

    def __init__(self, sql_type: str = "DATETIME"):
        super().__init__(sql_type, "datetime")

    def _to_domain(self, storage_value: Any) -> datetime:
        if isinstance(storage_value, datetime):
            return storage_value
        try:
            return datetime.fromisoformat(str(storage_value))
        except ValueError as exc:
            raise DecodeError(f"Cannot decode {storage_value!r} as an ISO 8601 datetime.") from exc

    def _to_storage(self, domain_value: Any) -> str:
        return domain_value.isoformat()
