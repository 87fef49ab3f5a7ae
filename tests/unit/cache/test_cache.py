##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `cache.py` module.
"""

import logging
from typing import Any, Dict, List

import pytest
from pytest_mock import MockerFixture

from tabula.backends.memory import MemoryExecutor
from tabula.cache import Cache
from tabula.config import Config
from tabula.config import configfile
from tabula.crud_helper import CrudHelper
from tests.fixture_entities import Membership, Player, Profile


@pytest.fixture
def player_cache(entities_player_crud: CrudHelper, entities_stored_players: List[Dict[str, Any]]) -> Cache:
    """
    A cache of players over an in-memory executor holding three players.

    Args:
        entities_player_crud: A `CrudHelper` for `Player` over an in-memory executor.
        entities_stored_players: The stored player rows.

    Returns:
        An empty cache.
    """
    return Cache(entities_player_crud)


class TestCacheReads:
    """Tests for reading through the cache."""

    def test_get_miss_reads_storage(self, player_cache: Cache, executors_memory: MemoryExecutor, mocker: MockerFixture):
        """
        Test that a miss reads the entity from storage and caches it as synchronized.

        Args:
            player_cache: A cache of players over three stored players.
            executors_memory: The in-memory executor holding the players.
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
        """
        spy = mocker.spy(executors_memory, "select_one")
        player = player_cache.get("7")
        assert player.name == "Alan"
        assert player.get_former_primary() == {"id": 7}
        assert "7" in player_cache
        assert player_cache.get_pending() == {}

        assert player_cache.get("7") is player
        assert spy.call_count == 1

    def test_get_absent_is_not_cached(
        self, player_cache: Cache, executors_memory: MemoryExecutor, mocker: MockerFixture
    ):
        """
        Test that a key missing from storage is not cached, so storage is queried again.

        Args:
            player_cache: A cache of players over three stored players.
            executors_memory: The in-memory executor holding the players.
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
        """
        spy = mocker.spy(executors_memory, "select_one")
        assert player_cache.get("42") is None
        assert player_cache.get("42") is None
        assert "42" not in player_cache
        assert spy.call_count == 2

    def test_get_single_key_with_separator(self, executors_memory: MemoryExecutor):
        """
        Test that a single-column key containing the separator is read as one value.

        Args:
            executors_memory: An empty in-memory executor.
        """
        profiles = Profile.get_table()
        executors_memory.insert(profiles, {"handle": "ada", "public_id": "p1", "bio": "wrong"})
        executors_memory.insert(profiles, {"handle": "ada-lovelace", "public_id": "p2", "bio": "right"})
        cache = Cache(CrudHelper(Profile, executors_memory))

        profile = cache.get("ada-lovelace")
        assert profile.get_primary() == {"handle": "ada-lovelace"}
        assert profile.bio == "right"

        cache.clear()
        cache.load_all()
        assert "ada-lovelace" in cache
        assert cache.get("ada-lovelace").bio == "right"

    def test_get_composite_key(self, entities_membership_crud: CrudHelper, executors_memory: MemoryExecutor):
        """
        Test that a composite key is split into one value per primary key column.

        Args:
            entities_membership_crud: A `CrudHelper` for `Membership` over an in-memory executor.
            executors_memory: The in-memory executor behind the helper.
        """
        executors_memory.insert(Membership.get_table(), {"tenant": "acme-corp", "user": "ada", "role": "owner"})
        cache = Cache(entities_membership_crud)
        assert cache.get("acme\\-corp-ada").role == "owner"

    @pytest.mark.parametrize("key", ["acme", "acme-ada-extra"])
    def test_get_composite_key_wrong_arity(
        self, entities_membership_crud: CrudHelper, executors_memory: MemoryExecutor, mocker: MockerFixture, key: str
    ):
        """
        Test that a key giving too few or too many values is a miss without any read.

        Args:
            entities_membership_crud: A `CrudHelper` for `Membership` over an in-memory executor.
            executors_memory: The in-memory executor behind the helper.
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
            key: A key not matching the two primary key columns.
        """
        executors_memory.insert(Membership.get_table(), {"tenant": "acme", "user": "ada"})
        spy = mocker.spy(executors_memory, "select_one")
        assert Cache(entities_membership_crud).get(key) is None
        spy.assert_not_called()

    def test_load_all(self, player_cache: Cache):
        """
        Test that loading every entity caches each one as synchronized.

        Args:
            player_cache: A cache of players over three stored players.
        """
        player_cache.load_all()
        assert len(player_cache) == 3
        assert player_cache.get("2").name == "Grace"
        assert player_cache.get_pending() == {}

    def test_load_by_criteria(self, player_cache: Cache):
        """
        Test that only the matching entities are loaded.

        Args:
            player_cache: A cache of players over three stored players.
        """
        player_cache.load_by_criteria({"name": ["Ada", "Alan"]})
        assert len(player_cache) == 2
        assert "1" in player_cache
        assert "7" in player_cache


class TestCachePendingEntries:
    """Tests for the pending entries of the cache."""

    def test_set_is_pending(self, player_cache: Cache):
        """
        Test that a value set locally is pending and returned by `get`.

        Args:
            player_cache: A cache of players over three stored players.
        """
        player = Player(12, name="Barbara")
        player_cache.set("12", player)
        assert player_cache.get("12") is player
        assert list(player_cache.get_pending()) == ["12"]

    def test_pending_isolated_from_other_entries(self, player_cache: Cache):
        """
        Test that setting one key leaves the other entries synchronized.

        Args:
            player_cache: A cache of players over three stored players.
        """
        player_cache.load_all()
        player = player_cache.get("1")
        player.name = "Augusta"
        player_cache.set("1", player)
        assert list(player_cache.get_pending()) == ["1"]

    def test_update_marks_pending(self, player_cache: Cache):
        """
        Test that `update` marks an entity changed in place as pending.

        Args:
            player_cache: A cache of players over three stored players.
        """
        player_cache.get("2").name = "Hopper"
        assert player_cache.get_pending() == {}
        assert player_cache.update("2") is True
        assert player_cache.get_pending()["2"].value.name == "Hopper"

    def test_update_missing_key(self, player_cache: Cache, caplog: pytest.LogCaptureFixture):
        """
        Test that marking a key that is not cached logs a warning.

        Args:
            player_cache: A cache of players over three stored players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        assert player_cache.update("2") is False
        assert "Cannot mark '2' as pending" in caplog.text


class TestCacheDiscards:
    """Tests for bulk operations replacing pending entries."""

    def test_load_discards_pending(self, player_cache: Cache, caplog: pytest.LogCaptureFixture):
        """
        Test that a load replaces a pending entry with the stored value and warns.

        Args:
            player_cache: A cache of players over three stored players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        player_cache.set("1", Player(1, name="Augusta"))
        player_cache.load_all()

        assert player_cache.get("1").name == "Ada"
        assert player_cache.get_pending() == {}
        assert "discarded pending changes for keys: ['1']" in caplog.text

    def test_clear_discards_pending(self, player_cache: Cache, caplog: pytest.LogCaptureFixture):
        """
        Test that clearing drops every entry and warns about pending ones.

        Args:
            player_cache: A cache of players over three stored players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        player_cache.get("2")
        player_cache.set("9", Player(9, name="Edsger"))
        player_cache.clear()

        assert len(player_cache) == 0
        assert "Clearing the cache discarded pending changes for keys: ['9']" in caplog.text

    def test_clear_synchronized_is_silent(self, player_cache: Cache, caplog: pytest.LogCaptureFixture):
        """
        Test that clearing synchronized entries logs nothing.

        Args:
            player_cache: A cache of players over three stored players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        player_cache.load_all()
        player_cache.clear()
        assert caplog.text == ""

    def test_warning_disabled(self, entities_player_crud: CrudHelper, caplog: pytest.LogCaptureFixture):
        """
        Test that no warning is logged when `warn_on_discard` is off.

        Args:
            entities_player_crud: A `CrudHelper` for `Player` over an in-memory executor.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        cache = Cache(entities_player_crud, warn_on_discard=False)
        cache.set("9", Player(9))
        cache.clear()
        assert caplog.text == ""

    def test_warning_setting_read_from_config(
        self, entities_player_crud: CrudHelper, monkeypatch: pytest.MonkeyPatch
    ):
        """
        Test that `warn_on_discard` defaults to the `cache.warn_on_discard` setting.

        Args:
            entities_player_crud: A `CrudHelper` for `Player` over an in-memory executor.
            monkeypatch: Pytest monkeypatch fixture.
        """
        assert Cache(entities_player_crud).warn_on_discard is True

        settings = configfile.get_default_config()
        settings["cache"]["warn_on_discard"] = False
        monkeypatch.setattr(configfile, "CONFIG", Config(settings))
        assert Cache(entities_player_crud).warn_on_discard is False


class TestCachePersistence:
    """Tests for `Cache.persist_all`."""

    def test_persist_all(self, player_cache: Cache, executors_memory: MemoryExecutor):
        """
        Test that pending entries are written and become synchronized.

        Args:
            player_cache: A cache of players over three stored players.
            executors_memory: The in-memory executor holding the players.
        """
        player = player_cache.get("7")
        player.name = "Turing"
        player_cache.set("7", player)

        assert player_cache.persist_all() == []
        assert player_cache.get_pending() == {}
        assert executors_memory.select_one(Player.get_table(), {"id": 7}) == {"id": 7, "name": "Turing"}

    def test_persist_failure_stays_pending(self, player_cache: Cache, caplog: pytest.LogCaptureFixture):
        """
        Test that an entry matching no stored row stays pending and is reported.

        Args:
            player_cache: A cache of players over three stored players.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        player_cache.set("12", Player(12, name="Barbara"))

        assert player_cache.persist_all() == ["12"]
        assert list(player_cache.get_pending()) == ["12"]
        assert "No row was updated for keys ['12']" in caplog.text

    def test_persist_nothing_pending(self, player_cache: Cache, mocker: MockerFixture):
        """
        Test that nothing is written when no entry is pending.

        Args:
            player_cache: A cache of players over three stored players.
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
        """
        player_cache.load_all()
        spy = mocker.spy(player_cache.crud, "update_one")
        assert player_cache.persist_all() == []
        spy.assert_not_called()
