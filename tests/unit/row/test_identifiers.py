##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `identifiers.py` module.
"""

import re

from tabula.row.identifiers import ID_FRAGMENT, PUBLIC_ID_FRAGMENT, BaseTable
from tests.fixture_entities import Player, Profile, Score


class TestIdFragments:
    """Tests for the reusable identifier fragments."""

    def test_id_fragment(self):
        """Test the table, column and index contributed by `ID_FRAGMENT`."""
        assert ID_FRAGMENT.table.primary_keys == ("id",)
        assert ID_FRAGMENT.table.auto_column == "id"
        assert [column.name for column in ID_FRAGMENT.columns] == ["id"]
        assert ID_FRAGMENT.indexes[0].unique

    def test_public_id_fragment(self):
        """Test that `PUBLIC_ID_FRAGMENT` adds a unique column without touching the primary key."""
        assert PUBLIC_ID_FRAGMENT.table is None
        assert [column.name for column in PUBLIC_ID_FRAGMENT.columns] == ["public_id"]
        assert PUBLIC_ID_FRAGMENT.indexes[0].name == "uniq_public_id"


class TestBaseTable:
    """Tests for the `BaseTable` base class."""

    def test_new_row_primary_holds_id(self):
        """Test that a new row always holds the `id` key, even without a value."""
        player = Player(name="Ada")
        assert player.get_primary() == {"id": None}
        assert player.get_id() is None

    def test_id_property(self):
        """Test that the `id` attribute reads and writes the current primary key."""
        player = Player(4)
        assert player.get_primary() == {"id": 4}
        player.id = 5
        assert player.get_primary() == {"id": 5}

    def test_subclass_table_name(self):
        """Test that `BaseTable` subclasses keep their declared table and inherit the key."""
        assert Player.get_table().name == "players"
        assert Player.get_table().auto_column == "id"
        assert BaseTable.get_table().name == "base_table"

    def test_composed_into_record(self):
        """Test that `HasId` with `ID_FRAGMENT` keys a record by `id`."""
        assert Score.get_primary_keys() == ("id",)
        assert [column.name for column in Score.get_columns()] == ["id", "player_id", "points"]


class TestAbstractRow:
    """Tests for the `AbstractRow` base class."""

    def test_public_id_and_primary(self):
        """Test that the public id is kept apart from the primary key."""
        profile = Profile(public_id="p-1", primary={"handle": "ada"}, bio="Analyst")
        assert profile.get_public_id() == "p-1"
        assert profile.get_primary() == {"handle": "ada"}
        assert profile.to_storage_row() == {"public_id": "p-1", "handle": "ada", "bio": "Analyst"}

    def test_generate_public_id(self):
        """Test that a generated public id is 32 hexadecimal characters and is stored."""
        profile = Profile()
        public_id = profile.generate_public_id()
        assert re.fullmatch(r"[0-9a-f]{32}", public_id)
        assert profile.get_public_id() == public_id

    def test_generated_public_ids_differ(self):
        """Test that two generated public ids are different."""
        assert Profile().generate_public_id() != Profile().generate_public_id()
