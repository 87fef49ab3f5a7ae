##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Schema helper for tables held by a [`RedisExecutor`][backends.redis.redis_executor.RedisExecutor].
"""

import logging

from redis import RedisError

from tabula.backends.schema_helper import SchemaHelper


LOG = logging.getLogger(__name__)


class RedisSchemaHelper(SchemaHelper):
    """
    Manages the keys of one entity type in Redis.

    Redis has no table definitions: creating a table does nothing and dropping
    it deletes every row hash of the table along with its auto column counter.
    """

    def create_table(self) -> bool:
        LOG.debug(f"Redis tables need no definition. Nothing to create for '{self.metadata.table_name}'.")
        return True

    def drop_table(self) -> bool:
        table_name = self.metadata.table_name
        LOG.info(f"Attempting to delete every '{table_name}' row from Redis...")
        try:
            keys = list(self.executor.row_keys(table_name))
            keys.append(self.executor.sequence_key(table_name))
            self.executor.client.delete(*keys)
        except RedisError as exc:
            LOG.error(f"Error dropping Redis table '{table_name}': {exc}")
            return False
        LOG.info(f"Successfully deleted {len(keys) - 1} '{table_name}' rows from Redis.")
        return True
