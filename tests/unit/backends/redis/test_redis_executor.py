##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `redis_executor.py` and `redis_schema_helper.py` modules.

The Redis client is mocked; these tests check the keys and commands the
executor issues.
"""

import logging
from typing import Dict

import pytest
from pytest_mock import MockerFixture
from redis import RedisError

from tabula.backends.redis import RedisExecutor, RedisSchemaHelper
from tabula.row.attributes import Table
from tests.fixture_entities import Player
from tests.fixture_types import FixtureRedis


PLAYERS = Table("players", ("id",), "id")
MEMBERSHIPS = Table("memberships", ("tenant", "user"))

STORED: Dict[str, Dict[str, str]] = {
    "players:row:1": {"id": "1", "name": '"Ada"'},
    "players:row:7": {"id": "7", "name": '"Alan"'},
}


@pytest.fixture
def stored_players(executors_mock_redis: FixtureRedis) -> FixtureRedis:
    """
    Make the mocked Redis client serve two stored player hashes.

    Args:
        executors_mock_redis: A mocked Redis client.

    Returns:
        The mocked Redis client.
    """
    executors_mock_redis.scan_iter.return_value = list(STORED)
    executors_mock_redis.hgetall.side_effect = lambda key: dict(STORED.get(key, {}))
    executors_mock_redis.exists.side_effect = lambda key: int(key in STORED)
    return executors_mock_redis


class TestRedisExecutorSetup:
    """Tests for building a `RedisExecutor`."""

    def test_connects_to_url(self, mocker: MockerFixture):
        """
        Test that a client is created from the URL when none is given.

        Args:
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
        """
        mock_redis = mocker.patch("tabula.backends.redis.redis_executor.Redis")
        executor = RedisExecutor(url="redis://cache:6380/2")
        mock_redis.from_url.assert_called_once_with(url="redis://cache:6380/2", decode_responses=True)
        assert executor.client is mock_redis.from_url.return_value

    def test_key_layout(self):
        """Test the row prefix and sequence key of a table."""
        assert RedisExecutor.row_prefix("players") == "players:row:"
        assert RedisExecutor.sequence_key("players") == "players:sequence"

    def test_schema_helper(self, executors_redis: RedisExecutor):
        """
        Test that the executor builds a Redis schema helper bound to itself.

        Args:
            executors_redis: A Redis executor using a mocked client.
        """
        helper = executors_redis.schema_helper(Player)
        assert isinstance(helper, RedisSchemaHelper)
        assert helper.executor is executors_redis


class TestRedisExecutorInsert:
    """Tests for the insert operations of `RedisExecutor`."""

    def test_insert_generates_key(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that the auto column is taken from the table sequence.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.incr.return_value = 5
        executors_mock_redis.exists.return_value = 0

        assert executors_redis.insert(PLAYERS, {"id": None, "name": "Ada"}) == "5"
        executors_mock_redis.incr.assert_called_once_with("players:sequence")
        executors_mock_redis.hset.assert_called_once_with("players:row:5", mapping={"id": "5", "name": '"Ada"'})

    def test_insert_composite_key(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that a composite key row is stored at its escaped primary string.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.exists.return_value = 0
        assert executors_redis.insert(MEMBERSHIPS, {"tenant": "a-b", "user": "ada"}) == "a\\-b-ada"
        executors_mock_redis.incr.assert_not_called()
        assert executors_mock_redis.hset.call_args.args == ("memberships:row:a\\-b-ada",)

    def test_insert_existing_key(
        self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis, caplog: pytest.LogCaptureFixture
    ):
        """
        Test that a row whose key already exists is not written.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        executors_mock_redis.exists.return_value = 1
        assert executors_redis.insert(PLAYERS, {"id": 1, "name": "Ada"}) is None
        executors_mock_redis.hset.assert_not_called()
        assert "already exists" in caplog.text

    def test_insert_redis_error(
        self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis, caplog: pytest.LogCaptureFixture
    ):
        """
        Test that a Redis failure is logged as an error and reported as None.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.ERROR)
        executors_mock_redis.exists.return_value = 0
        executors_mock_redis.hset.side_effect = RedisError("connection refused")
        assert executors_redis.insert(PLAYERS, {"id": 1, "name": "Ada"}) is None
        assert "connection refused" in caplog.text

    def test_insert_many_duplicates_in_batch(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that a batch holding the same key twice writes nothing.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.exists.return_value = 0
        rows = [{"tenant": "acme", "user": "ada"}, {"tenant": "acme", "user": "ada"}]
        assert executors_redis.insert_many(MEMBERSHIPS, rows) is False
        executors_mock_redis.pipeline.assert_not_called()

    def test_insert_many_pipeline(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that a valid batch is written in one pipeline.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.exists.return_value = 0
        pipeline = executors_mock_redis.pipeline.return_value
        rows = [{"tenant": "acme", "user": "ada"}, {"tenant": "acme", "user": "bob"}]

        assert executors_redis.insert_many(MEMBERSHIPS, rows) is True
        assert pipeline.hset.call_count == 2
        pipeline.execute.assert_called_once()


class TestRedisExecutorQueries:
    """Tests for the select, update and delete operations of `RedisExecutor`."""

    def test_select_one_by_primary_key(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that criteria pinning the primary key read the row hash directly.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.select_one(PLAYERS, {"id": "7"}) == {"id": 7, "name": "Alan"}
        stored_players.hgetall.assert_called_once_with("players:row:7")
        stored_players.scan_iter.assert_not_called()

    def test_select_one_scans_other_criteria(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that other criteria scan the table keys and filter the rows.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.select_one(PLAYERS, {"name": "Alan"}, columns="id") == {"id": 7}
        stored_players.scan_iter.assert_called_once_with(match="players:row:*")

    def test_select_one_missing(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that a missing row gives None.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.select_one(PLAYERS, {"id": 3}) is None

    def test_select_many(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test reading every row and filtered rows.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert len(executors_redis.select_many(PLAYERS)) == 2
        assert executors_redis.select_many(PLAYERS, {"id": [7, 9]}) == [{"id": 7, "name": "Alan"}]

    def test_select_many_redis_error(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that a Redis failure while reading gives an empty list.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.scan_iter.side_effect = RedisError("timeout")
        assert executors_redis.select_many(PLAYERS) == []

    def test_update_in_place(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that an update keeping the primary key rewrites the same hash.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.update(PLAYERS, {"id": 7, "name": "Turing"}, {"id": 7}) is True
        stored_players.hset.assert_called_once_with("players:row:7", mapping={"id": "7", "name": '"Turing"'})
        stored_players.delete.assert_not_called()

    def test_update_moves_changed_key(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that changing the primary key moves the hash to its new key.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.update(PLAYERS, {"id": 8, "name": "Alan"}, {"id": 7}) is True
        stored_players.delete.assert_called_once_with("players:row:7")
        stored_players.hset.assert_called_once_with("players:row:8", mapping={"id": "8", "name": '"Alan"'})

    def test_update_onto_existing_key(
        self, executors_redis: RedisExecutor, stored_players: FixtureRedis, caplog: pytest.LogCaptureFixture
    ):
        """
        Test that changing a primary key to one already stored leaves both rows alone.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        assert executors_redis.update(PLAYERS, {"id": 7}, {"id": 1}) is False
        stored_players.exists.assert_called_with("players:row:7")
        stored_players.delete.assert_not_called()
        stored_players.hset.assert_not_called()
        assert "Nothing updated" in caplog.text

    def test_update_many_onto_one_key(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that moving several rows to the same primary key writes nothing.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.update(PLAYERS, {"id": 9}, {"name": ["Ada", "Alan"]}) is False
        stored_players.delete.assert_not_called()
        stored_players.hset.assert_not_called()

    def test_update_no_match(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that an update matching no row writes nothing and returns False.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.update(PLAYERS, {"name": "Nobody"}, {"id": 99}) is False
        stored_players.hset.assert_not_called()

    def test_delete(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that `delete` removes the hashes of the matching rows.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.delete(PLAYERS, {"name": ["Ada", "Alan"]}) is True
        stored_players.delete.assert_called_once_with("players:row:1", "players:row:7")

    def test_delete_no_match(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that deleting a missing row returns False without calling Redis `delete`.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.delete(PLAYERS, {"id": 3}) is False
        stored_players.delete.assert_not_called()


class TestRedisSchemaHelper:
    """Tests for the `RedisSchemaHelper` class."""

    def test_create_table_is_a_no_op(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that creating a Redis table issues no command.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        assert executors_redis.schema_helper(Player).create_table() is True
        assert not executors_mock_redis.method_calls

    def test_drop_table(self, executors_redis: RedisExecutor, stored_players: FixtureRedis):
        """
        Test that dropping a table deletes its rows and its sequence.

        Args:
            executors_redis: A Redis executor using a mocked client.
            stored_players: The mocked Redis client serving two players.
        """
        assert executors_redis.schema_helper(Player).drop_table() is True
        stored_players.delete.assert_called_once_with("players:row:1", "players:row:7", "players:sequence")

    def test_drop_table_error(self, executors_redis: RedisExecutor, executors_mock_redis: FixtureRedis):
        """
        Test that a Redis failure while dropping returns False.

        Args:
            executors_redis: A Redis executor using a mocked client.
            executors_mock_redis: The mocked Redis client.
        """
        executors_mock_redis.scan_iter.return_value = []
        executors_mock_redis.delete.side_effect = RedisError("read only replica")
        assert executors_redis.schema_helper(Player).drop_table() is False
