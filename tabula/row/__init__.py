##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `row` package maps entity types onto storage rows.

Subpackages:
    table_types: Converters between storage values and domain values.

Modules:
    attributes.py: The `Table`, `Column`, `Index` and `ForeignKey` descriptors.
    metadata.py: Declaration (`entity`, `MetadataFragment`) and resolution
        (`MetadataResolver`) of entity metadata.
    row.py: The `Row` base class hydrating and dehydrating entities.
    identifiers.py: Reusable `id` / `public_id` metadata and the `BaseTable`
        and `AbstractRow` base classes.
    row_converter.py: Conversion of entities to and from dicts, JSON and JSON files.
"""

from tabula.row.attributes import Column, ForeignKey, Index, Table
from tabula.row.identifiers import ID_FRAGMENT, PUBLIC_ID_FRAGMENT, AbstractRow, BaseTable, HasId, HasPublicId
from tabula.row.metadata import (
    FieldAccessor,
    MetadataFragment,
    MetadataResolver,
    ResolvedMetadata,
    entity,
    merge_fragments,
    resolve_metadata,
)
from tabula.row.row import Row, instantiate_from_row, primary_property
from tabula.row.row_converter import RowConverter


__all__ = [
    "ID_FRAGMENT",
    "PUBLIC_ID_FRAGMENT",
    "AbstractRow",
    "BaseTable",
    "Column",
    "FieldAccessor",
    "ForeignKey",
    "HasId",
    "HasPublicId",
    "Index",
    "MetadataFragment",
    "MetadataResolver",
    "ResolvedMetadata",
    "Row",
    "RowConverter",
    "Table",
    "entity",
    "instantiate_from_row",
    "merge_fragments",
    "primary_property",
    "resolve_metadata",
]
