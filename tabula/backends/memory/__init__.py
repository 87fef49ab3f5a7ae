##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
In-memory storage for Tabula.

Modules:
    memory_executor: Contains `MemoryExecutor`, keeping tables as lists of row dicts.
    memory_schema_helper: Contains `MemorySchemaHelper`, creating and dropping in-memory tables.
"""

from tabula.backends.memory.memory_executor import MemoryExecutor
from tabula.backends.memory.memory_schema_helper import MemorySchemaHelper


__all__ = ["MemoryExecutor", "MemorySchemaHelper"]
