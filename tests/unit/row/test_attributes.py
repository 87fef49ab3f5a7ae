##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `attributes.py` module.
"""

from dataclasses import FrozenInstanceError

import pytest

from tabula.row.attributes import Column, ForeignKey, Index, Table
from tabula.row.table_types import IntegerType, StringType
from tests.fixture_entities import Player


class TestTable:
    """Tests for the `Table` descriptor."""

    def test_primary_keys_become_a_tuple(self):
        """Test that primary keys given as a list are stored as a tuple."""
        assert Table("players", ["id"]).primary_keys == ("id",)

    def test_merge_later_name_and_auto_column_win(self):
        """Test that the later table's name and auto column replace the earlier ones."""
        merged = Table("a", ("id",), "id").merge(Table("b", ("tenant",), "serial"))
        assert merged == Table("b", ("id", "tenant"), "serial")

    def test_merge_falls_back_to_earlier_values(self):
        """Test that unset values of the later table keep the earlier ones."""
        merged = Table("a", ("id",), "id").merge(Table(primary_keys=("tenant",)))
        assert merged == Table("a", ("id", "tenant"), "id")

    def test_merge_with_nothing(self):
        """Test that merging with no table gives a copy of the table."""
        table = Table("a", ("id",))
        assert table.merge(None) == table

    def test_frozen(self):
        """Test that a table cannot be modified."""
        with pytest.raises(FrozenInstanceError):
            Table("a").name = "b"


class TestColumn:
    """Tests for the `Column` descriptor."""

    def test_defaults(self):
        """Test the default values of a column."""
        column = Column("name", StringType())
        assert column.nullable is True
        assert column.default is None
        assert column.attribute == "name"

    def test_attribute_replaces_spaces(self):
        """Test that the backing attribute of a column name with spaces uses underscores."""
        assert Column("display name", StringType()).attribute == "display_name"

    def test_explicit_attribute(self):
        """Test that an explicit backing attribute is kept."""
        assert Column("nm", StringType(), attribute="name").attribute == "name"

    def test_conversion_delegates_to_type(self):
        """Test that a column converts values with its table type."""
        column = Column("id", IntegerType())
        assert column.to_domain("12") == 12
        assert column.to_storage(12) == 12
        assert column.storage_type == "INTEGER(10)"
        assert column.domain_type == "int"


class TestIndex:
    """Tests for the `Index` descriptor."""

    @pytest.mark.parametrize(
        "index, expected_name",
        [
            (Index(["id"], unique=True), "uniq_id"),
            (Index(["Tenant", "User"]), "index_tenant_user"),
            (Index(["role"], name="by_role"), "by_role"),
        ],
    )
    def test_name(self, index: Index, expected_name: str):
        """
        Test the default and explicit index names.

        Args:
            index: The index under test.
            expected_name: The expected index name.
        """
        assert index.name == expected_name

    def test_columns_become_a_tuple(self):
        """Test that indexed columns given as a list are stored as a tuple."""
        assert Index(["a", "b"]).columns == ("a", "b")


class TestForeignKey:
    """Tests for the `ForeignKey` descriptor."""

    def test_name_from_table_name(self):
        """Test the default name of a foreign key targeting a table name."""
        foreign_key = ForeignKey("Players", ["Id"], ["player_id"])
        assert foreign_key.name == "fk_players_id"
        assert foreign_key.target_table() == "Players"

    def test_name_from_entity_type(self):
        """Test the default name of a foreign key targeting an entity type."""
        foreign_key = ForeignKey(Player, ["id"], ["player_id"])
        assert foreign_key.name == "fk_player_id"
        assert foreign_key.target_name == "Player"

    def test_target_table_resolves_entity(self):
        """Test that the target table of an entity type comes from its resolved metadata."""
        assert ForeignKey(Player, ["id"], ["player_id"]).target_table() == "players"
