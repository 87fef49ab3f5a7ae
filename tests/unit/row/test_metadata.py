##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `metadata.py` module.

Every test declares its entity types against its own `MetadataResolver`, so
the process-wide resolver used by the rest of the suite is left untouched.
"""

import logging
import threading

import pytest

from tabula.exceptions import SchemaError
from tabula.row.attributes import Column, ForeignKey, Index, Table
from tabula.row.metadata import MetadataFragment, MetadataResolver, entity, merge_fragments, resolve_metadata
from tabula.row.row import Row
from tabula.row.table_types import IntegerType, StringType
from tests.fixture_entities import Membership, Player


# pylint: disable=too-few-public-methods


@pytest.fixture
def resolver() -> MetadataResolver:
    """
    A resolver with no declarations. Resets on each test.

    Returns:
        A new `MetadataResolver`.
    """
    return MetadataResolver()


class TestMergeFragments:
    """Tests for the `merge_fragments` function."""

    def test_earlier_without_table_takes_later_table(self):
        """Test that the later table is used as is when the earlier fragment has none."""
        merged = merge_fragments(MetadataFragment(), MetadataFragment(table=Table("b", ("id",))))
        assert merged.table == Table("b", ("id",))

    def test_primary_keys_concatenate(self):
        """Test that primary keys are concatenated, earlier first."""
        merged = merge_fragments(
            MetadataFragment(table=Table(primary_keys=("id",))),
            MetadataFragment(table=Table(primary_keys=("tenant",))),
        )
        assert merged.table.primary_keys == ("id", "tenant")

    def test_lists_concatenate_without_deduplication(self):
        """Test that columns, indexes and foreign keys are concatenated as they are."""
        first = Column("name", StringType(32))
        second = Column("name", StringType(64))
        merged = merge_fragments(
            MetadataFragment(columns=[first], indexes=[Index(["name"])], foreign_keys=[ForeignKey("t", ["a"], ["b"])]),
            MetadataFragment(columns=[second], indexes=[Index(["name"])]),
        )
        assert merged.columns == (first, second)
        assert len(merged.indexes) == 2
        assert len(merged.foreign_keys) == 1

    def test_flatten_merges_nested_fragments_first(self):
        """Test that a fragment's nested fragments are merged before its own declarations."""
        inner = MetadataFragment(table=Table("inner", ("id",)), columns=[Column("id", IntegerType())])
        outer = MetadataFragment(
            table=Table("outer", ("code",)), columns=[Column("code", StringType())], fragments=[inner]
        )
        flat = outer.flatten()
        assert flat.table == Table("outer", ("id", "code"))
        assert [column.name for column in flat.columns] == ["id", "code"]
        assert flat.fragments == ()


class TestMetadataResolver:
    """Tests for the `MetadataResolver` class."""

    def test_fragment_then_type_primary_keys(self, resolver: MetadataResolver):
        """
        Test that a fragment's primary keys come before the type's own primary keys.

        Args:
            resolver: A resolver with no declarations.
        """
        fragment = MetadataFragment(table=Table(primary_keys=("id",)), columns=[Column("id", IntegerType())])

        @entity(
            table=Table(primary_keys=("tenant",)),
            columns=[Column("tenant", StringType())],
            fragments=[fragment],
            resolver=resolver,
        )
        class Scoped(Row):
            pass

        assert resolver.resolve(Scoped).table.primary_keys == ("id", "tenant")

    def test_type_table_name_overrides_fragment(self, resolver: MetadataResolver):
        """
        Test that the table name declared on a type wins over a fragment's table name.

        Args:
            resolver: A resolver with no declarations.
        """
        fragment = MetadataFragment(table=Table("a"))

        @entity(table=Table("b"), fragments=[fragment], resolver=resolver)
        class Named(Row):
            pass

        assert resolver.resolve(Named).table.name == "b"

    def test_order_fragments_then_ancestor_then_type(self, resolver: MetadataResolver):
        """
        Test that fragments are merged first, then the ancestor, then the type itself.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(table=Table("base", ("id",)), columns=[Column("id", IntegerType())], resolver=resolver)
        class Base(Row):
            pass

        fragment = MetadataFragment(table=Table(primary_keys=("region",)), columns=[Column("region", StringType())])

        @entity(
            table=Table("child", ("code",)),
            columns=[Column("code", StringType())],
            fragments=[fragment],
            resolver=resolver,
        )
        class Child(Base):
            pass

        resolved = resolver.resolve(Child)
        assert [column.name for column in resolved.columns] == ["region", "id", "code"]
        assert resolved.table.primary_keys == ("region", "id", "code")
        assert resolved.table.name == "child"

    def test_undeclared_mixins_are_skipped(self, resolver: MetadataResolver):
        """
        Test that the ancestor is the first base carrying metadata, skipping plain mixins.

        Args:
            resolver: A resolver with no declarations.
        """

        class Mixin:
            pass

        @entity(table=Table("base", ("id",)), columns=[Column("id", IntegerType())], resolver=resolver)
        class Base(Row):
            pass

        @entity(columns=[Column("extra", StringType())], resolver=resolver)
        class Mixed(Mixin, Base):
            pass

        resolved = resolver.resolve(Mixed)
        assert resolved.table.name == "base"
        assert [column.name for column in resolved.columns] == ["id", "extra"]

    def test_undeclared_subclass_inherits_metadata(self, resolver: MetadataResolver):
        """
        Test that a subclass declaring nothing resolves to its ancestor's metadata.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(table=Table(primary_keys=("id",)), columns=[Column("id", IntegerType())], resolver=resolver)
        class GameSession(Row):
            pass

        class RankedGameSession(GameSession):
            pass

        resolved = resolver.resolve(RankedGameSession)
        assert resolved.table.primary_keys == ("id",)
        assert resolved.table.name == "ranked_game_session"

    def test_table_name_derived_from_type_name(self, resolver: MetadataResolver):
        """
        Test that a table without a name is named after the type, in snake case.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(table=Table(), resolver=resolver)
        class PlayerScore(Row):
            pass

        assert resolver.resolve(PlayerScore).table_name == "player_score"
        assert resolver.collect(PlayerScore).table.name is None

    def test_no_table_raises(self, resolver: MetadataResolver):
        """
        Test that a type with no table anywhere raises a `SchemaError`.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(columns=[Column("name", StringType())], resolver=resolver)
        class Tableless(Row):
            pass

        with pytest.raises(SchemaError, match="Tableless"):
            resolver.resolve(Tableless)

    def test_resolution_is_cached(self, resolver: MetadataResolver):
        """
        Test that resolving a type twice gives the same object.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(table=Table("cached"), resolver=resolver)
        class Cached(Row):
            pass

        assert resolver.resolve(Cached) is resolver.resolve(Cached)

    def test_redeclaring_resolved_type_warns(self, resolver: MetadataResolver, caplog: pytest.LogCaptureFixture):
        """
        Test that declaring metadata for an already resolved type logs a warning
        and leaves the resolved metadata unchanged.

        Args:
            resolver: A resolver with no declarations.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)

        @entity(table=Table("first"), resolver=resolver)
        class Redeclared(Row):
            pass

        resolver.resolve(Redeclared)
        entity(table=Table("second"), resolver=resolver)(Redeclared)

        assert "already resolved" in caplog.text
        assert resolver.resolve(Redeclared).table_name == "first"

    def test_concurrent_first_resolution(self, resolver: MetadataResolver):
        """
        Test that concurrent first resolutions of a type all get the same metadata.

        Args:
            resolver: A resolver with no declarations.
        """

        @entity(table=Table("shared"), columns=[Column("id", IntegerType())], resolver=resolver)
        class Shared(Row):
            pass

        results = []
        threads = [threading.Thread(target=lambda: results.append(resolver.resolve(Shared))) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(result is results[0] for result in results)


class TestResolvedMetadata:
    """Tests for the `ResolvedMetadata` class, using the shared test entities."""

    def test_player_metadata(self):
        """Test the resolved metadata of `Player`, built on `BaseTable`."""
        metadata = resolve_metadata(Player)
        assert metadata.table == Table("players", ("id",), "id")
        assert [column.name for column in metadata.columns] == ["id", "name"]
        assert metadata.get_column("name").storage_type == "VARCHAR(255)"
        assert metadata.indexes[0].name == "uniq_id"

    def test_last_column_declaration_wins(self, resolver: MetadataResolver):
        """
        Test that looking up a column declared twice gives the last declaration.

        Args:
            resolver: A resolver with no declarations.
        """
        fragment = MetadataFragment(columns=[Column("name", StringType(32))])

        @entity(table=Table("dupes"), columns=[Column("name", StringType(64))], fragments=[fragment], resolver=resolver)
        class Dupes(Row):
            pass

        metadata = resolver.resolve(Dupes)
        assert len(metadata.columns) == 2
        assert metadata.get_column("name").storage_type == "VARCHAR(64)"
        assert list(metadata.column_definitions) == ["name"]

    def test_is_primary_key(self):
        """Test the primary key check on a composite key."""
        metadata = resolve_metadata(Membership)
        assert metadata.is_primary_key("tenant")
        assert metadata.is_primary_key("user")
        assert not metadata.is_primary_key("role")

    def test_accessors_read_and_write_attributes(self):
        """Test that field accessors read and write the attribute behind a column."""
        player = Player(name="Ada")
        accessor = resolve_metadata(Player).accessors["name"]
        assert accessor.get(player) == "Ada"
        accessor.set(player, "Grace")
        assert player.name == "Grace"

    def test_describe(self):
        """Test that `describe` renders every column with its key flags."""
        text = resolve_metadata(Player).describe()
        assert text.startswith("Table: players")
        assert "Storage Type" in text
        assert "PK AUTO" in text
        assert "VARCHAR(255)" in text
