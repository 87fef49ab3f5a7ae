##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the abstract base class for schema helpers.

A schema helper creates and drops the storage table of one entity type from
its resolved metadata. Only the [`Record`][record.record.Record] lifecycle
uses it.
"""

from abc import ABC, abstractmethod

from tabula.backends.storage_executor import StorageExecutor
from tabula.row.metadata import ResolvedMetadata, resolve_metadata


class SchemaHelper(ABC):
    """
    Base class for all schema helpers.

    Attributes:
        executor (StorageExecutor): The executor of the storage holding the table.
        entity_type (type): The `Row` subclass whose table is managed.

    Methods:
        metadata: Get the resolved metadata of the managed entity type.
        create_table: Create the table of the entity type.
        drop_table: Drop the table of the entity type.
    """

    def __init__(self, executor: StorageExecutor, entity_type: type):
        """
        Args:
            executor: The executor of the storage holding the table.
            entity_type: The `Row` subclass whose table is managed.
        """
        self.executor: StorageExecutor = executor
        self.entity_type: type = entity_type

    @property
    def metadata(self) -> ResolvedMetadata:
        """The resolved metadata of the managed entity type."""
        return resolve_metadata(self.entity_type)

    @abstractmethod
    def create_table(self) -> bool:
        """
        Create the table of the entity type if it does not exist yet.

        Returns:
            True if the table exists once the call returns.
        """
        raise NotImplementedError("Subclasses of `SchemaHelper` must implement a `create_table` method.")

    @abstractmethod
    def drop_table(self) -> bool:
        """
        Drop the table of the entity type and every row it holds.

        Returns:
            True if the table no longer exists once the call returns.
        """
        raise NotImplementedError("Subclasses of `SchemaHelper` must implement a `drop_table` method.")
