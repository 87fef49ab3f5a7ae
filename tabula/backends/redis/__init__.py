##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Redis storage for Tabula.

Modules:
    redis_executor: Contains `RedisExecutor`, keeping rows as JSON-encoded Redis hashes.
    redis_schema_helper: Contains `RedisSchemaHelper`, deleting the keys of a table.
"""

from tabula.backends.redis.redis_executor import RedisExecutor
from tabula.backends.redis.redis_schema_helper import RedisSchemaHelper


__all__ = ["RedisExecutor", "RedisSchemaHelper"]
