##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
SQLite DDL generation from resolved entity metadata.

`SQLiteSchemaHelper` turns the table, columns, indexes and foreign keys of an
entity type into `CREATE TABLE` / `CREATE INDEX` statements and drops the
table again with `DROP TABLE`.
"""

import logging
import sqlite3
from typing import Any, List

from tabula.backends.schema_helper import SchemaHelper
from tabula.backends.utils import quote_identifier
from tabula.row.attributes import Column, ForeignKey, Index


LOG = logging.getLogger(__name__)


def sql_literal(value: Any) -> str:
    """
    Render a storage value as a SQL literal.

    Args:
        value: The storage value.

    Returns:
        `NULL`, the number itself, or a single-quoted string.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


class SQLiteSchemaHelper(SchemaHelper):
    """
    Creates and drops the SQLite table of one entity type.

    An auto column that is the only primary key becomes
    `INTEGER PRIMARY KEY AUTOINCREMENT`. Index names are prefixed with the table
    name, since SQLite index names are shared by every table of a database.

    Methods:
        column_definition: Build the definition of one column.
        create_table_statements: Build every statement creating the table and its indexes.
        drop_table_statement: Build the statement dropping the table.
        create_table: Create the table and its indexes.
        drop_table: Drop the table.
    """

    def _is_rowid_alias(self, column: Column) -> bool:
        table = self.metadata.table
        return column.name == table.auto_column and table.primary_keys == (column.name,)

    def column_definition(self, column: Column) -> str:
        """
        Build the definition of one column.

        Args:
            column: The column.

        Returns:
            The column definition for a `CREATE TABLE` statement.
        """
        if self._is_rowid_alias(column):
            return f"{quote_identifier(column.name)} INTEGER PRIMARY KEY AUTOINCREMENT"

        parts = [quote_identifier(column.name), column.storage_type]
        if not column.nullable:
            parts.append("NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {sql_literal(column.to_storage(column.default))}")
        return " ".join(parts)

    def _foreign_key_constraint(self, foreign_key: ForeignKey) -> str:
        local_str = ", ".join(quote_identifier(column) for column in foreign_key.local_columns)
        target_str = ", ".join(quote_identifier(column) for column in foreign_key.target_columns)
        return (
            f"CONSTRAINT {quote_identifier(foreign_key.name)} FOREIGN KEY ({local_str}) "
            f"REFERENCES {quote_identifier(foreign_key.target_table())} ({target_str})"
        )

    def _index_statement(self, index: Index) -> str:
        table_name = self.metadata.table_name
        unique_str = "UNIQUE " if index.unique else ""
        columns_str = ", ".join(quote_identifier(column) for column in index.columns)
        return (
            f"CREATE {unique_str}INDEX IF NOT EXISTS {quote_identifier(f'{table_name}_{index.name}')} "
            f"ON {quote_identifier(table_name)} ({columns_str})"
        )

    def create_table_statements(self) -> List[str]:
        """
        Build every statement creating the table and its indexes.

        Returns:
            The `CREATE TABLE` statement followed by one `CREATE INDEX` statement per index.
        """
        metadata = self.metadata
        table = metadata.table
        columns = list(metadata.column_definitions.values())

        definitions = [self.column_definition(column) for column in columns]
        if table.primary_keys and not any(self._is_rowid_alias(column) for column in columns):
            if table.auto_column is not None:
                LOG.warning(
                    f"SQLite cannot generate '{table.auto_column}' for the composite primary key of '{table.name}'. "
                    "Values must be provided on insert."
                )
            keys_str = ", ".join(quote_identifier(key) for key in table.primary_keys)
            definitions.append(f"PRIMARY KEY ({keys_str})")
        definitions.extend(self._foreign_key_constraint(foreign_key) for foreign_key in metadata.foreign_keys)

        statements = [f"CREATE TABLE IF NOT EXISTS {quote_identifier(table.name)} ({', '.join(definitions)})"]
        statements.extend(self._index_statement(index) for index in metadata.indexes)
        return statements

    def drop_table_statement(self) -> str:
        """
        Build the statement dropping the table.

        Returns:
            The `DROP TABLE` statement.
        """
        return f"DROP TABLE IF EXISTS {quote_identifier(self.metadata.table_name)}"

    def create_table(self) -> bool:
        table_name = self.metadata.table_name
        LOG.debug(f"Creating SQLite table '{table_name}'...")
        try:
            with self.executor.connection() as conn:
                for statement in self.create_table_statements():
                    LOG.debug(f"SQLite query: {statement}")
                    conn.execute(statement)
        except sqlite3.Error as exc:
            LOG.error(f"Error creating SQLite table '{table_name}': {exc}")
            return False
        LOG.debug(f"Successfully created SQLite table '{table_name}'.")
        return True

    def drop_table(self) -> bool:
        table_name = self.metadata.table_name
        LOG.debug(f"Dropping SQLite table '{table_name}'...")
        try:
            with self.executor.connection() as conn:
                conn.execute(self.drop_table_statement())
        except sqlite3.Error as exc:
            LOG.error(f"Error dropping SQLite table '{table_name}': {exc}")
            return False
        LOG.debug(f"Successfully dropped SQLite table '{table_name}'.")
        return True
