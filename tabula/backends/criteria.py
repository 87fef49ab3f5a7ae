##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Selection criteria used by the storage executors.

A `Criteria` is an immutable mapping of column name to expected value:

- a scalar means equality,
- None means the column is NULL,
- a list or tuple means the column value is one of the listed values.

Scalars compare the way SQL type affinity does, so the integer `7` matches
the string `"7"`.
"""

from collections.abc import Mapping as MappingABC
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Tuple

from tabula.backends.utils import quote_identifier


def _loosely_equal(actual: Any, expected: Any) -> bool:
    """
    Compare a stored value with an expected value.

    Args:
        actual: The stored value.
        expected: The expected (non-None) value.

    Returns:
        True if both values are equal, or equal once converted to strings.
    """
    if actual is None:
        return False
    return actual == expected or str(actual) == str(expected)


class Criteria(MappingABC):
    """
    Immutable mapping of column name to the value a row must hold.

    Attributes:
        _conditions (MappingProxyType): The read-only conditions, list values stored as tuples.

    Methods:
        matches: Check whether a storage row satisfies every condition.
        to_sql: Build a SQL WHERE clause and its parameters.
    """

    def __init__(self, conditions: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        """
        Build criteria from a flat mapping and/or keyword arguments.

        Args:
            conditions: A mapping of column name to expected value.
            kwargs: More conditions, keyed by column name.
        """
        merged = dict(conditions or {})
        merged.update(kwargs)
        for column, value in merged.items():
            if isinstance(value, list):
                merged[column] = tuple(value)
        self._conditions = MappingProxyType(merged)

    def __getitem__(self, column: str) -> Any:
        return self._conditions[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def __repr__(self) -> str:
        return f"Criteria({dict(self._conditions)!r})"

    def matches(self, row: Mapping[str, Any]) -> bool:
        """
        Check whether a storage row satisfies every condition.

        Args:
            row: A mapping of column name to storage value. Missing columns count as NULL.

        Returns:
            True if the row matches all conditions (an empty criteria matches every row).
        """
        for column, expected in self._conditions.items():
            actual = row.get(column)
            if expected is None:
                if actual is not None:
                    return False
            elif isinstance(expected, tuple):
                if not any(_loosely_equal(actual, value) for value in expected):
                    return False
            elif not _loosely_equal(actual, expected):
                return False
        return True

    def to_sql(self, placeholder: str = "?") -> Tuple[str, List[Any]]:
        """
        Build the SQL WHERE clause and the associated parameter list.

        Args:
            placeholder: The parameter placeholder of the SQL driver.

        Returns:
            A tuple of (where_clause, params). The clause is empty when there
            is no condition.
        """
        if not self._conditions:
            return "", []

        conditions = []
        params = []

        for column, value in self._conditions.items():
            quoted = quote_identifier(column)
            if value is None:
                conditions.append(f"{quoted} IS NULL")
            elif isinstance(value, tuple):
                if not value:
                    # `IN ()` is not valid SQL
                    conditions.append("1 = 0")
                else:
                    conditions.append(f"{quoted} IN ({', '.join(placeholder for _ in value)})")
                    params.extend(value)
            else:
                conditions.append(f"{quoted} = {placeholder}")
                params.append(value)

        where_clause = "WHERE " + " AND ".join(conditions)
        return where_clause, params


def as_criteria(criteria: Optional[Mapping[str, Any]]) -> Criteria:
    """
    Turn a flat mapping (or None) into a `Criteria`.

    Args:
        criteria: A `Criteria`, a flat mapping of column name to value, or None.

    Returns:
        The matching `Criteria` (empty for None).
    """
    if isinstance(criteria, Criteria):
        return criteria
    return Criteria(criteria)
