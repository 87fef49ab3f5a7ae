##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
SQLite storage for Tabula.

Modules:
    sqlite_connection: Contains `SQLiteConnection`, a context manager opening configured connections.
    sqlite_executor: Contains `SQLiteExecutor`, running row operations as SQL statements.
    sqlite_schema_helper: Contains `SQLiteSchemaHelper`, generating SQLite DDL from entity metadata.
"""

from tabula.backends.sqlite.sqlite_connection import SQLiteConnection
from tabula.backends.sqlite.sqlite_executor import SQLiteExecutor
from tabula.backends.sqlite.sqlite_schema_helper import SQLiteSchemaHelper


__all__ = ["SQLiteConnection", "SQLiteExecutor", "SQLiteSchemaHelper"]
