##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Reusable identifier metadata and the convenience base classes built on it.

- `ID_FRAGMENT` contributes an auto-generated integer `id` primary key with a
  unique index. `HasId` exposes it as the `id` attribute.
- `PUBLIC_ID_FRAGMENT` contributes a `public_id` string column with a unique
  index. `HasPublicId` reads and generates it.
- `BaseTable` is a `Row` keyed by `id`; `AbstractRow` is a `Row` exposing a
  public id.
"""

# pylint: disable=too-few-public-methods

import uuid
from typing import Any, Mapping, Optional

from tabula.row.attributes import Column, Index, Table
from tabula.row.metadata import MetadataFragment, entity
from tabula.row.row import Row, primary_property
from tabula.row.table_types import IntegerType, StringType


ID_FRAGMENT = MetadataFragment(
    table=Table(primary_keys=("id",), auto_column="id"),
    columns=[Column("id", IntegerType(), nullable=False)],
    indexes=[Index(["id"], unique=True)],
)

PUBLIC_ID_FRAGMENT = MetadataFragment(
    columns=[Column("public_id", StringType(), nullable=False)],
    indexes=[Index(["public_id"], unique=True)],
)


class HasId:
    """
    Mixin for rows keyed by an integer `id` column.

    Compose `ID_FRAGMENT` into the entity metadata alongside this mixin.

    Methods:
        get_id: Get the internal numeric identifier of this row.
    """

    id = primary_property("id", doc="Internal numeric identifier (auto-generated primary key).")

    def get_id(self) -> Optional[int]:
        """
        Get the internal numeric identifier of this row.

        Returns:
            The current `id` primary key value, or None for an unsaved row.
        """
        return self.id


class HasPublicId:
    """
    Mixin for rows exposing a `public_id` distinct from their primary key.

    Compose `PUBLIC_ID_FRAGMENT` into the entity metadata alongside this mixin.

    Methods:
        get_public_id: Get the public identifier of this row.
        generate_public_id: Assign a new random public identifier.
    """

    public_id: Optional[str] = None

    def get_public_id(self) -> Optional[str]:
        """
        Get the public identifier of this row.

        Returns:
            The public id, or None if none was set or generated.
        """
        return self.public_id

    def generate_public_id(self) -> str:
        """
        Assign a new random public identifier (32 hexadecimal characters).

        Returns:
            The generated public id.
        """
        self.public_id = uuid.uuid4().hex
        return self.public_id


@entity(fragments=[ID_FRAGMENT])
class BaseTable(HasId, Row):
    """
    Base class for rows with a single integer primary key named `id`.

    Subclasses declare their own table and columns with `entity`; the `id`
    column, its unique index and the `id` primary key come from this class.
    """

    def __init__(self, id: Optional[int] = None, **fields):  # pylint: disable=redefined-builtin
        """
        Initialize the row with an optional `id`.

        The `id` key is always present in the current primary key, so a new
        row with `id=None` is inserted with a generated identifier.

        Args:
            id: The primary key value, or None for an unsaved row.
            fields: Other column values keyed by column name.
        """
        super().__init__({"id": id}, **fields)


@entity(fragments=[PUBLIC_ID_FRAGMENT])
class AbstractRow(HasPublicId, Row):
    """
    Base class for rows exposing a public identifier distinct from their primary key.
    """

    def __init__(self, public_id: Optional[str] = None, primary: Optional[Mapping[str, Any]] = None, **fields):
        """
        Initialize the row with an optional public id and primary key values.

        Args:
            public_id: The public identifier to expose.
            primary: Map of primary key column name to value.
            fields: Other column values keyed by column name.
        """
        super().__init__(primary, **fields)
        self.public_id = public_id
