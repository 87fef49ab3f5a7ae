##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module houses the immutable descriptors that make up the metadata of an
entity type: its `Table`, its `Column`s, its `Index`es and its `ForeignKey`s.

These descriptors are declared on entity types (or on reusable metadata
fragments) and merged by the [`MetadataResolver`][row.metadata.MetadataResolver].
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from tabula.row.table_types import TableType


@dataclass(frozen=True)
class Table:
    """
    Table information of an entity type.

    Attributes:
        name: The storage table name. None means the name is derived from the
            entity type name when the metadata is resolved.
        primary_keys: The primary key column names, in order.
        auto_column: The name of the auto-generated key column, if any.
    """

    name: Optional[str] = None
    primary_keys: Sequence[str] = ()
    auto_column: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "primary_keys", tuple(self.primary_keys))

    def merge(self, later: Optional["Table"]) -> "Table":
        """
        Combine this table with a later (more specific) declaration.

        The later table's name and auto column win when they are set; primary
        keys are concatenated, this table's first.

        Args:
            later: The more specific table declaration, if any.

        Returns:
            The merged table.
        """
        if later is None:
            return Table(self.name, self.primary_keys, self.auto_column)
        return Table(
            later.name if later.name is not None else self.name,
            self.primary_keys + later.primary_keys,
            later.auto_column if later.auto_column is not None else self.auto_column,
        )


@dataclass(frozen=True)
class Column:
    """
    A column an entity type reads from and writes to.

    Attributes:
        name: The storage column name.
        type: The table type converting values of this column.
        nullable: Whether the column accepts NULL values.
        default: The domain value used when none is provided.
        attribute: The entity attribute backing this column. Defaults to the
            column name with spaces replaced by underscores.
    """

    name: str
    type: TableType
    nullable: bool = True
    default: Any = None
    attribute: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.attribute is None:
            object.__setattr__(self, "attribute", self.name.replace(" ", "_"))

    @property
    def storage_type(self) -> str:
        """The storage type mnemonic of this column's table type."""
        return self.type.storage_type

    @property
    def domain_type(self) -> str:
        """The domain type name of this column's table type."""
        return self.type.domain_type

    def to_domain(self, storage_value: Any) -> Any:
        """
        Convert a raw storage value into the domain value of this column.

        Args:
            storage_value: The value as fetched from storage.

        Returns:
            The domain value.
        """
        return self.type.to_domain(storage_value)

    def to_storage(self, domain_value: Any) -> Any:
        """
        Convert a domain value into the storage representation of this column.

        Args:
            domain_value: The value held by the entity.

        Returns:
            The storage value.
        """
        return self.type.to_storage(domain_value)


@dataclass(frozen=True)
class Index:
    """
    A table index.

    Attributes:
        columns: The indexed column names, in index order.
        unique: Whether the index enforces uniqueness.
        name: The index name. Defaults to `uniq_<columns>` or `index_<columns>`.
    """

    columns: Sequence[str]
    unique: bool = False
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        if self.name is None:
            prefix = "uniq_" if self.unique else "index_"
            object.__setattr__(self, "name", prefix + "_".join(self.columns).lower())


@dataclass(frozen=True)
class ForeignKey:
    """
    A foreign key between two entity types.

    Attributes:
        target: The referenced entity type, or the referenced table name.
        target_columns: The referenced column names on the target table.
        local_columns: The column names of this table taking part in the relation.
        name: The constraint name. Defaults to `fk_<target>_<target columns>`.
    """

    target: Union[type, str]
    target_columns: Sequence[str]
    local_columns: Sequence[str]
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "target_columns", tuple(self.target_columns))
        object.__setattr__(self, "local_columns", tuple(self.local_columns))
        if self.name is None:
            object.__setattr__(self, "name", f"fk_{self.target_name}_{'_'.join(self.target_columns)}".lower())

    @property
    def target_name(self) -> str:
        """The name of the referenced entity type (or table)."""
        return self.target if isinstance(self.target, str) else self.target.__name__

    def target_table(self) -> str:
        """
        Get the storage table name of the referenced entity.

        Returns:
            The target table name, resolved through the target's metadata when
            the target is an entity type.
        """
        if isinstance(self.target, str):
            return self.target
        from tabula.row.metadata import resolve_metadata  # pylint: disable=import-outside-toplevel

        return resolve_metadata(self.target).table.name

