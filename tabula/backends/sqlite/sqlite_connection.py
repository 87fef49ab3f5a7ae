##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
SQLite connection context manager used by the SQLite executor and schema helper.
"""

import logging
import sqlite3
import sys
from pathlib import Path
from types import TracebackType
from typing import Type


LOG = logging.getLogger(__name__)


class SQLiteConnection:
    """
    Context manager opening, configuring and closing one SQLite connection.

    Connections are created with:
    - autocommit (statements apply immediately unless a transaction is opened with BEGIN)
    - WAL journal mode
    - foreign key constraint enforcement
    - name-based column access via `sqlite3.Row`

    Attributes:
        db_path (str): Path to the database file.
        conn (sqlite3.Connection): The active connection used within the context.

    Methods:
        __enter__: Open and configure the connection.
        __exit__: Close the connection.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path to the database file.
        """
        self.db_path: str = db_path
        self.conn: sqlite3.Connection = None

    def __enter__(self) -> sqlite3.Connection:
        """
        Open a configured SQLite connection.

        The parent directory of the database file is created if needed.

        Returns:
            A sqlite connection.
        """
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {"check_same_thread": False}
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        self.conn = sqlite3.connect(self.db_path, **connection_kwargs)

        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")

        self.conn.row_factory = sqlite3.Row

        return self.conn

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        """
        Close the connection if it is still open.

        Args:
            exc_type: The exception type raised, if any.
            exc_value: The exception instance raised, if any.
            traceback: The traceback object, if an exception was raised.
        """
        if self.conn:
            self.conn.close()
