##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `RecordManager` class, bundling the helpers a
[`Record`][record.record.Record] needs.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Type

from tabula.backends.schema_helper import SchemaHelper
from tabula.backends.storage_executor import StorageExecutor
from tabula.crud_helper import CrudHelper


LOG = logging.getLogger(__name__)

SchemaFactory = Callable[[StorageExecutor, type], SchemaHelper]


@dataclass(frozen=True)
class RecordManager:
    """
    Bundles the data operations and the table operations of one record type.

    Attributes:
        crud: The helper running create/read/update/delete operations.
        schema: The helper creating and dropping the table.

    Methods:
        create: Wire both helpers for an entity type and an executor.
    """

    crud: CrudHelper
    schema: SchemaHelper

    @classmethod
    def create(
        cls, entity_type: Type, executor: StorageExecutor, schema_factory: Optional[SchemaFactory] = None
    ) -> "RecordManager":
        """
        Wire a `CrudHelper` and a `SchemaHelper` for an entity type.

        Args:
            entity_type: The `Row` subclass managed by the helpers.
            executor: The executor running every storage operation.
            schema_factory: A callable taking the executor and the entity type and
                returning a `SchemaHelper` (a `SchemaHelper` subclass works). Defaults
                to the schema helper of the executor.

        Returns:
            The record manager.
        """
        if schema_factory is None:
            schema = executor.schema_helper(entity_type)
        else:
            schema = schema_factory(executor, entity_type)
        LOG.debug(f"Created record manager for '{entity_type.__name__}' with {type(schema).__name__}.")
        return cls(crud=CrudHelper(entity_type, executor), schema=schema)
