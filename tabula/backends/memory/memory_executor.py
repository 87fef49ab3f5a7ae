##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
In-memory storage executor.

Tables are lists of row dicts held by the executor instance. Rows are copied on
the way in and on the way out, so callers never share a row with the storage.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from tabula.backends.criteria import Criteria, as_criteria
from tabula.backends.memory.memory_schema_helper import MemorySchemaHelper
from tabula.backends.storage_executor import StorageExecutor
from tabula.backends.utils import project_row, row_key
from tabula.row.attributes import Table


LOG = logging.getLogger(__name__)


class MemoryExecutor(StorageExecutor):
    """
    Storage executor keeping every table in process memory.

    Primary keys are enforced: inserting a row whose primary key values match
    an existing row is rejected. Auto columns are generated from a per-table
    sequence starting at 1.

    Attributes:
        _tables (Dict[str, List[Dict[str, Any]]]): The rows of each table, keyed by table name.
        _sequences (Dict[str, int]): The last value generated for the auto column of each table.

    Methods:
        has_table: Check whether a table exists.
        create_table: Create an empty table.
        drop_table: Drop a table and its rows.
        insert: Insert one row.
        insert_many: Insert several rows, all or nothing.
        select_one: Read the first row matching some criteria.
        select_many: Read every row matching some criteria.
        update: Overwrite the rows matching some criteria.
        delete: Delete the rows matching some criteria.
        schema_helper: Build a `MemorySchemaHelper` for an entity type.
    """

    def __init__(self):
        self._tables: Dict[str, List[Dict[str, Any]]] = {}
        self._sequences: Dict[str, int] = {}

    def has_table(self, table_name: str) -> bool:
        """
        Check whether a table exists.

        Args:
            table_name: The table name.

        Returns:
            True if the table was created (explicitly or by an insert) and not dropped.
        """
        return table_name in self._tables

    def create_table(self, table_name: str) -> bool:
        """
        Create an empty table unless it already exists.

        Args:
            table_name: The table name.

        Returns:
            True if the table was created, False if it already existed.
        """
        if table_name in self._tables:
            return False
        self._tables[table_name] = []
        LOG.debug(f"Created in-memory table '{table_name}'.")
        return True

    def drop_table(self, table_name: str) -> bool:
        """
        Drop a table, its rows and its auto column sequence.

        Args:
            table_name: The table name.

        Returns:
            True if the table existed.
        """
        self._sequences.pop(table_name, None)
        existed = self._tables.pop(table_name, None) is not None
        LOG.debug(f"Dropped in-memory table '{table_name}'.")
        return existed

    def _bump_sequence(self, table_name: str, value: Any):
        """
        Move the auto column sequence of a table past `value`.

        Args:
            table_name: The table name.
            value: An auto column value that was just stored.
        """
        try:
            numeric = int(value)
        except (TypeError, ValueError):
            return
        self._sequences[table_name] = max(self._sequences.get(table_name, 0), numeric)

    def insert(self, table: Table, row: Mapping[str, Any]) -> Optional[str]:
        rows = self._tables.setdefault(table.name, [])
        new_row = dict(row)

        generated = None
        auto_column = table.auto_column
        if auto_column is not None and new_row.get(auto_column) is None:
            generated = self._sequences.get(table.name, 0) + 1
            new_row[auto_column] = generated

        if table.primary_keys:
            key_criteria = Criteria({column: new_row.get(column) for column in table.primary_keys})
            if any(key_criteria.matches(existing) for existing in rows):
                LOG.warning(
                    f"A row with primary key '{row_key(table, new_row)}' already exists in '{table.name}'. "
                    "Row not inserted."
                )
                return None

        rows.append(new_row)
        if auto_column is not None:
            self._bump_sequence(table.name, new_row[auto_column])

        LOG.debug(f"Inserted a row in in-memory table '{table.name}'.")
        return str(generated) if generated is not None else row_key(table, new_row)

    def insert_many(self, table: Table, rows: Iterable[Mapping[str, Any]]) -> bool:
        snapshot = list(self._tables.get(table.name, []))
        sequence = self._sequences.get(table.name)

        for row in rows:
            if self.insert(table, row) is None:
                LOG.warning(f"Batch insert into '{table.name}' failed. Rolling back the rows of this batch.")
                self._tables[table.name] = snapshot
                if sequence is None:
                    self._sequences.pop(table.name, None)
                else:
                    self._sequences[table.name] = sequence
                return False
        return True

    def select_one(
        self,
        table: Table,
        criteria: Mapping[str, Any],
        columns: Optional[Union[str, Iterable[str]]] = None,
    ) -> Optional[Dict[str, Any]]:
        criteria = as_criteria(criteria)
        for existing in self._tables.get(table.name, []):
            if criteria.matches(existing):
                return project_row(existing, columns)
        return None

    def select_many(self, table: Table, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        criteria = as_criteria(criteria)
        log_action = "filtered" if criteria else "all"
        criteria_msg = f" with criteria: {criteria}" if criteria else ""
        LOG.info(f"Fetching {log_action} rows of '{table.name}' from memory{criteria_msg}...")
        rows = [dict(existing) for existing in self._tables.get(table.name, []) if criteria.matches(existing)]
        LOG.info(f"Successfully retrieved {len(rows)} rows of '{table.name}' from memory ({log_action}).")
        return rows

    def update(self, table: Table, row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
        criteria = as_criteria(criteria)
        rows = self._tables.get(table.name, [])
        matched = [existing for existing in rows if criteria.matches(existing)]

        if table.primary_keys:
            merged = [{**existing, **row} for existing in matched]
            after = [existing for existing in rows if not criteria.matches(existing)] + merged
            for new_row in merged:
                key_criteria = Criteria({column: new_row.get(column) for column in table.primary_keys})
                if sum(1 for other in after if key_criteria.matches(other)) > 1:
                    LOG.warning(
                        f"A row with primary key '{row_key(table, new_row)}' already exists in '{table.name}'. "
                        "Nothing updated."
                    )
                    return False

        for existing in matched:
            existing.update(row)
        updated = len(matched)

        if updated == 0:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing updated.")
        else:
            LOG.debug(f"Updated {updated} rows of in-memory table '{table.name}'.")
        return updated > 0

    def delete(self, table: Table, criteria: Mapping[str, Any]) -> bool:
        criteria = as_criteria(criteria)
        rows = self._tables.get(table.name, [])
        kept = [existing for existing in rows if not criteria.matches(existing)]
        deleted = len(rows) - len(kept)
        if table.name in self._tables:
            self._tables[table.name] = kept

        if deleted == 0:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing deleted.")
        else:
            LOG.debug(f"Deleted {deleted} rows of in-memory table '{table.name}'.")
        return deleted > 0

    def schema_helper(self, entity_type: type) -> MemorySchemaHelper:
        return MemorySchemaHelper(self, entity_type)
