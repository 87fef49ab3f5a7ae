##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Redis-based storage executor.

Each row is a Redis hash stored at `<table>:row:<primary string>`, every value
JSON encoded so storage types survive the round trip. The auto column of a
table is generated from the counter at `<table>:sequence`.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from redis import Redis, RedisError

from tabula.backends.criteria import Criteria, as_criteria
from tabula.backends.redis.redis_schema_helper import RedisSchemaHelper
from tabula.backends.storage_executor import StorageExecutor
from tabula.backends.utils import deserialize_row, project_row, row_key, serialize_row
from tabula.row.attributes import Table


LOG = logging.getLogger(__name__)

DEFAULT_URL = "redis://localhost:6379/0"


class RedisExecutor(StorageExecutor):
    """
    Storage executor keeping rows as Redis hashes.

    Lookups whose criteria give a scalar value for every primary key read the
    row's hash directly; any other criteria scan the table's keys and filter
    the rows in Python.

    Attributes:
        client (Redis): The Redis client used for every operation.

    Methods:
        row_prefix: Get the key prefix of the rows of a table.
        sequence_key: Get the key of the auto column counter of a table.
        row_keys: Iterate over the Redis keys of the rows of a table.
        insert: Insert one row.
        insert_many: Insert several rows, all or nothing.
        select_one: Read the first row matching some criteria.
        select_many: Read every row matching some criteria.
        update: Overwrite the rows matching some criteria.
        delete: Delete the rows matching some criteria.
        schema_helper: Build a `RedisSchemaHelper` for an entity type.
    """

    def __init__(self, client: Redis = None, url: str = DEFAULT_URL):
        """
        Use an existing Redis client or connect to a Redis URL.

        Args:
            client: A Redis client created with `decode_responses=True`.
            url: The Redis connection URL, used when no client is given.
        """
        if client is None:
            client = Redis.from_url(url=url, decode_responses=True)
        self.client: Redis = client

    @staticmethod
    def row_prefix(table_name: str) -> str:
        """
        Get the key prefix of the rows of a table.

        Args:
            table_name: The table name.

        Returns:
            The prefix shared by every row key of the table.
        """
        return f"{table_name}:row:"

    @staticmethod
    def sequence_key(table_name: str) -> str:
        """
        Get the key of the auto column counter of a table.

        Args:
            table_name: The table name.

        Returns:
            The counter key.
        """
        return f"{table_name}:sequence"

    def row_keys(self, table_name: str) -> Iterable[str]:
        """
        Iterate over the Redis keys of the rows of a table.

        Args:
            table_name: The table name.

        Returns:
            An iterator over the row keys.
        """
        return self.client.scan_iter(match=f"{self.row_prefix(table_name)}*")

    def _direct_key(self, table: Table, criteria: Criteria) -> Optional[str]:
        """
        Get the row key addressed by criteria that pin every primary key.

        Args:
            table: The resolved table.
            criteria: The selection criteria.

        Returns:
            The row key, or None if the criteria do not give a scalar value for
            every primary key.
        """
        if not table.primary_keys:
            return None
        for column in table.primary_keys:
            if criteria.get(column) is None or isinstance(criteria[column], tuple):
                return None
        return self.row_prefix(table.name) + row_key(table, criteria)

    def _matching(self, table: Table, criteria: Criteria) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Find the rows matching some criteria.

        Args:
            table: The resolved table.
            criteria: The selection criteria.

        Returns:
            A list of (row key, row) tuples.
        """
        direct_key = self._direct_key(table, criteria)
        keys = [direct_key] if direct_key is not None else self.row_keys(table.name)

        matches = []
        for key in keys:
            data = self.client.hgetall(key)
            if not data:
                continue
            row = deserialize_row(data)
            if criteria.matches(row):
                matches.append((key, row))
        return matches

    def _prepare_insert(self, table: Table, row: Mapping[str, Any]) -> Tuple[str, Dict[str, Any], bool]:
        """
        Fill in the auto column of a row and compute its key.

        Args:
            table: The resolved table.
            row: The row to insert.

        Returns:
            A tuple of (row key, row, generated).
        """
        new_row = dict(row)
        generated = table.auto_column is not None and new_row.get(table.auto_column) is None
        if generated:
            new_row[table.auto_column] = self.client.incr(self.sequence_key(table.name))
        if table.primary_keys:
            key = row_key(table, new_row)
        else:
            key = str(self.client.incr(self.sequence_key(table.name)))
        return self.row_prefix(table.name) + key, new_row, generated

    def insert(self, table: Table, row: Mapping[str, Any]) -> Optional[str]:
        try:
            key, new_row, generated = self._prepare_insert(table, row)
            if self.client.exists(key):
                LOG.warning(f"A row with key '{key}' already exists in Redis. Row not inserted.")
                return None
            LOG.debug(f"Creating a '{table.name}' row in Redis at '{key}'...")
            self.client.hset(key, mapping=serialize_row(new_row))
        except RedisError as exc:
            LOG.error(f"Error inserting a row in '{table.name}': {exc}")
            return None

        LOG.debug(f"Successfully created a '{table.name}' row in Redis.")
        if generated:
            return str(new_row[table.auto_column])
        return row_key(table, new_row)

    def insert_many(self, table: Table, rows: Iterable[Mapping[str, Any]]) -> bool:
        try:
            prepared = [self._prepare_insert(table, row) for row in rows]
            keys = [key for key, _, _ in prepared]
            if len(set(keys)) != len(keys) or any(self.client.exists(key) for key in keys):
                LOG.warning(f"A batch of '{table.name}' rows holds duplicate or existing keys. No row inserted.")
                return False

            pipeline = self.client.pipeline()
            for key, new_row, _ in prepared:
                pipeline.hset(key, mapping=serialize_row(new_row))
            pipeline.execute()
        except RedisError as exc:
            LOG.error(f"Error inserting a batch of rows in '{table.name}': {exc}")
            return False

        LOG.debug(f"Successfully created {len(prepared)} '{table.name}' rows in Redis.")
        return True

    def select_one(
        self,
        table: Table,
        criteria: Mapping[str, Any],
        columns: Optional[Union[str, Iterable[str]]] = None,
    ) -> Optional[Dict[str, Any]]:
        try:
            matches = self._matching(table, as_criteria(criteria))
        except RedisError as exc:
            LOG.error(f"Error reading a row of '{table.name}': {exc}")
            return None

        if not matches:
            return None
        return project_row(matches[0][1], columns)

    def select_many(self, table: Table, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        criteria = as_criteria(criteria)
        log_action = "filtered" if criteria else "all"
        criteria_msg = f" with criteria: {criteria}" if criteria else ""
        LOG.info(f"Fetching {log_action} rows of '{table.name}' from Redis{criteria_msg}...")

        try:
            rows = [row for _, row in self._matching(table, criteria)]
        except RedisError as exc:
            LOG.error(f"Error reading rows of '{table.name}': {exc}")
            return []

        LOG.info(f"Successfully retrieved {len(rows)} rows of '{table.name}' from Redis ({log_action}).")
        return rows

    def update(self, table: Table, row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
        try:
            matches = self._matching(table, as_criteria(criteria))
            moves = []
            for key, existing in matches:
                existing.update(row)
                new_key = self.row_prefix(table.name) + row_key(table, existing) if table.primary_keys else key
                moves.append((key, new_key, existing))

            new_keys = [new_key for _, new_key, _ in moves]
            taken = [new_key for key, new_key, _ in moves if new_key != key and self.client.exists(new_key)]
            if taken or len(set(new_keys)) != len(new_keys):
                LOG.warning(f"Updating '{table.name}' would overwrite the row at {taken or new_keys}. Nothing updated.")
                return False

            for key, new_key, existing in moves:
                if new_key != key:
                    LOG.debug(f"Primary key changed. Moving Redis row '{key}' to '{new_key}'.")
                    self.client.delete(key)
                self.client.hset(new_key, mapping=serialize_row(existing))
        except RedisError as exc:
            LOG.error(f"Error updating rows of '{table.name}': {exc}")
            return False

        if not matches:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing updated.")
        return len(matches) > 0

    def delete(self, table: Table, criteria: Mapping[str, Any]) -> bool:
        try:
            keys = [key for key, _ in self._matching(table, as_criteria(criteria))]
            if keys:
                LOG.debug(f"Deleting {len(keys)} '{table.name}' hashes from Redis...")
                self.client.delete(*keys)
        except RedisError as exc:
            LOG.error(f"Error deleting rows of '{table.name}': {exc}")
            return False

        if not keys:
            LOG.debug(f"No rows of '{table.name}' matched {criteria}. Nothing deleted.")
        return len(keys) > 0

    def schema_helper(self, entity_type: type) -> RedisSchemaHelper:
        return RedisSchemaHelper(self, entity_type)
