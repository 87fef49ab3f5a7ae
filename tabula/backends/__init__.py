##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `backends` package runs the generic row operations of Tabula against
concrete storage.

Subpackages:
    memory: The in-memory storage executor, used by default and in tests.
    redis: The Redis storage executor, keeping rows as hashes.
    sqlite: The SQLite storage executor.

Modules:
    criteria.py: The `Criteria` mapping used to select rows.
    executor_factory.py: The factory building executors by name or from configuration.
    schema_helper.py: The abstract base class for creating and dropping tables.
    storage_executor.py: The abstract base class of every storage executor.
    utils.py: Helpers shared by the executors.
"""

from tabula.backends.criteria import Criteria, as_criteria
from tabula.backends.executor_factory import TabulaExecutorFactory, executor_factory
from tabula.backends.schema_helper import SchemaHelper
from tabula.backends.storage_executor import StorageExecutor


__all__ = [
    "Criteria",
    "SchemaHelper",
    "StorageExecutor",
    "TabulaExecutorFactory",
    "as_criteria",
    "executor_factory",
]
