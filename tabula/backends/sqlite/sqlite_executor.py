##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
SQLite-based storage executor.

Every operation opens its own connection through
[`SQLiteConnection`][backends.sqlite.sqlite_connection.SQLiteConnection] and
closes it before returning, so the database must be a file.
"""

import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from tabula.backends.criteria import as_criteria
from tabula.backends.sqlite.sqlite_connection import SQLiteConnection
from tabula.backends.sqlite.sqlite_schema_helper import SQLiteSchemaHelper
from tabula.backends.storage_executor import StorageExecutor
from tabula.backends.utils import quote_identifier, row_key
from tabula.exceptions import ConfigurationError
from tabula.row.attributes import Table


LOG = logging.getLogger(__name__)


class SQLiteExecutor(StorageExecutor):
    """
    Storage executor running SQL statements against a SQLite database.

    Constraint violations (`sqlite3.IntegrityError`) are logged as warnings and
    any other `sqlite3.Error` as errors; both are reported through the None/False
    results of the `StorageExecutor` contract.

    Attributes:
        db_path (str): Path to the SQLite database file.

    Methods:
        connection: Build a connection context manager for the database.
        insert: Insert one row.
        insert_many: Insert several rows in one transaction.
        select_one: Read the first row matching some criteria.
        select_many: Read every row matching some criteria.
        update: Overwrite the rows matching some criteria.
        delete: Delete the rows matching some criteria.
        schema_helper: Build a `SQLiteSchemaHelper` for an entity type.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path to the SQLite database file.

        Raises:
            (exceptions.ConfigurationError): If `db_path` names an in-memory database.
        """
        if db_path == ":memory:":
            raise ConfigurationError(
                "SQLite in-memory databases are not supported: each operation opens its own connection. "
                "Use a database file, or the 'memory' storage type."
            )
        self.db_path: str = db_path

    def connection(self) -> SQLiteConnection:
        """
        Build a connection context manager for the database.

        Returns:
            A `SQLiteConnection` for `db_path`.
        """
        return SQLiteConnection(self.db_path)

    @staticmethod
    def _insert_statement(table: Table, row: Mapping[str, Any]) -> Tuple[str, List[Any], bool]:
        """
        Build the INSERT statement of one row.

        A None value in the auto column is left out so SQLite generates it.

        Args:
            table: The resolved table.
            row: The row to insert.

        Returns:
            A tuple of (query, params, generated) where `generated` tells whether
            the auto column value is generated by SQLite.
        """
        values = dict(row)
        generated = table.auto_column is not None and values.get(table.auto_column) is None
        if generated:
            values.pop(table.auto_column, None)

        if not values:
            return f"INSERT INTO {quote_identifier(table.name)} DEFAULT VALUES", [], generated

        columns_str = ", ".join(quote_identifier(column) for column in values)
        placeholders_str = ", ".join("?" for _ in values)
        query = f"INSERT INTO {quote_identifier(table.name)} ({columns_str}) VALUES ({placeholders_str})"
        return query, list(values.values()), generated

    def insert(self, table: Table, row: Mapping[str, Any]) -> Optional[str]:
        query, params, generated = self._insert_statement(table, row)
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        try:
            with self.connection() as conn:
                cursor = conn.execute(query, params)
                last_row_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            LOG.warning(f"SQLite rejected a row of '{table.name}': {exc}")
            return None
        except sqlite3.Error as exc:
            LOG.error(f"Error inserting a row in '{table.name}': {exc}")
            return None

        LOG.debug(f"Successfully inserted a row in '{table.name}'.")
        return str(last_row_id) if generated else row_key(table, row)

    def insert_many(self, table: Table, rows: Iterable[Mapping[str, Any]]) -> bool:
        rows = list(rows)
        try:
            with self.connection() as conn:
                conn.execute("BEGIN")
                try:
                    for row in rows:
                        query, params, _ = self._insert_statement(table, row)
                        conn.execute(query, params)
                except sqlite3.Error:
                    conn.execute("ROLLBACK")
                    raise
                conn.execute("COMMIT")
        except sqlite3.IntegrityError as exc:
            LOG.warning(f"SQLite rejected a batch of {len(rows)} rows of '{table.name}': {exc}")
            return False
        except sqlite3.Error as exc:
            LOG.error(f"Error inserting a batch of {len(rows)} rows in '{table.name}': {exc}")
            return False

        LOG.debug(f"Successfully inserted {len(rows)} rows in '{table.name}'.")
        return True

    def select_one(
        self,
        table: Table,
        criteria: Mapping[str, Any],
        columns: Optional[Union[str, Iterable[str]]] = None,
    ) -> Optional[Dict[str, Any]]:
        where_clause, params = as_criteria(criteria).to_sql()
        if columns is None:
            columns_str = "*"
        else:
            columns = [columns] if isinstance(columns, str) else list(columns)
            columns_str = ", ".join(quote_identifier(column) for column in columns)
        query = f"SELECT {columns_str} FROM {quote_identifier(table.name)} {where_clause} LIMIT 1"
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        try:
            with self.connection() as conn:
                row = conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            LOG.error(f"Error reading a row of '{table.name}': {exc}")
            return None

        return None if row is None else dict(row)

    def select_many(self, table: Table, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        criteria = as_criteria(criteria)
        log_action = "filtered" if criteria else "all"
        criteria_msg = f" with criteria: {criteria}" if criteria else ""
        LOG.info(f"Fetching {log_action} rows of '{table.name}' from SQLite{criteria_msg}...")

        where_clause, params = criteria.to_sql()
        query = f"SELECT * FROM {quote_identifier(table.name)} {where_clause}"
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        try:
            with self.connection() as conn:
                rows = [dict(row) for row in conn.execute(query, params).fetchall()]
        except sqlite3.Error as exc:
            LOG.error(f"Error reading rows of '{table.name}': {exc}")
            return []

        LOG.info(f"Successfully retrieved {len(rows)} rows of '{table.name}' from SQLite ({log_action}).")
        return rows

    def update(self, table: Table, row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
        if not row:
            return False
        where_clause, where_params = as_criteria(criteria).to_sql()
        set_str = ", ".join(f"{quote_identifier(column)} = ?" for column in row)
        query = f"UPDATE {quote_identifier(table.name)} SET {set_str} {where_clause}"
        params = list(row.values()) + where_params
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        try:
            with self.connection() as conn:
                updated = conn.execute(query, params).rowcount
        except sqlite3.IntegrityError as exc:
            LOG.warning(f"SQLite rejected an update of '{table.name}': {exc}")
            return False
        except sqlite3.Error as exc:
            LOG.error(f"Error updating rows of '{table.name}': {exc}")
            return False

        if updated == 0:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing updated.")
        return updated > 0

    def delete(self, table: Table, criteria: Mapping[str, Any]) -> bool:
        where_clause, params = as_criteria(criteria).to_sql()
        query = f"DELETE FROM {quote_identifier(table.name)} {where_clause}"
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        try:
            with self.connection() as conn:
                deleted = conn.execute(query, params).rowcount
        except sqlite3.IntegrityError as exc:
            LOG.warning(f"SQLite rejected a delete from '{table.name}': {exc}")
            return False
        except sqlite3.Error as exc:
            LOG.error(f"Error deleting rows of '{table.name}': {exc}")
            return False

        if deleted == 0:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing deleted.")
        else:
            LOG.debug(f"Successfully deleted {deleted} rows of '{table.name}'.")
        return deleted > 0

    def schema_helper(self, entity_type: type) -> SQLiteSchemaHelper:
        return SQLiteSchemaHelper(self, entity_type)
