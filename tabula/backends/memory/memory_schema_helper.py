##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Schema helper for tables held by a [`MemoryExecutor`][backends.memory.memory_executor.MemoryExecutor].
"""

import logging

from tabula.backends.schema_helper import SchemaHelper


LOG = logging.getLogger(__name__)


class MemorySchemaHelper(SchemaHelper):
    """
    Creates and drops in-memory tables. Memory tables have no column layout,
    so only the table name of the resolved metadata is used.
    """

    def create_table(self) -> bool:
        table_name = self.metadata.table_name
        if not self.executor.create_table(table_name):
            LOG.debug(f"In-memory table '{table_name}' already exists.")
        return True

    def drop_table(self) -> bool:
        table_name = self.metadata.table_name
        if not self.executor.drop_table(table_name):
            LOG.debug(f"In-memory table '{table_name}' did not exist.")
        return True
