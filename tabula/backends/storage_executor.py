##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the abstract base class for every storage executor.

A storage executor runs the generic row operations issued by the
[`CrudHelper`][crud_helper.CrudHelper] against one kind of storage. Storage
level rejections (duplicate key, constraint failure, unreachable server) are
logged by the executor and reported through a None/False result; they never
raise.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Union

from tabula.row.attributes import Table


if TYPE_CHECKING:
    from tabula.backends.schema_helper import SchemaHelper


class StorageExecutor(ABC):
    """
    Base class for all storage executors supported in Tabula.

    Every method receives the resolved [`Table`][row.attributes.Table] of the
    entity type it works on, and rows as flat mappings of column name to storage
    value.

    Methods:
        insert: Insert one row.
        insert_many: Insert several rows, all or nothing.
        select_one: Read the first row matching some criteria.
        select_many: Read every row matching some criteria.
        update: Overwrite the rows matching some criteria.
        delete: Delete the rows matching some criteria.
        schema_helper: Build the schema helper of an entity type for this storage.
    """

    @abstractmethod
    def insert(self, table: Table, row: Mapping[str, Any]) -> Optional[str]:
        """
        Insert one row.

        When the table has an auto column and the row holds None for it, the
        storage generates the value.

        Args:
            table: The resolved table.
            row: The row to insert.

        Returns:
            The generated key when the auto column was generated, else the
            primary string of the row. None if the storage rejected the row.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement an `insert` method.")

    @abstractmethod
    def insert_many(self, table: Table, rows: Iterable[Mapping[str, Any]]) -> bool:
        """
        Insert several rows. Either every row is inserted or none is.

        Args:
            table: The resolved table.
            rows: The rows to insert.

        Returns:
            True if every row was inserted, False otherwise.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement an `insert_many` method.")

    @abstractmethod
    def select_one(
        self,
        table: Table,
        criteria: Mapping[str, Any],
        columns: Optional[Union[str, Iterable[str]]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Read the first row matching some criteria.

        Args:
            table: The resolved table.
            criteria: The [`Criteria`][backends.criteria.Criteria] (or flat mapping) to match.
            columns: A column name or list of column names to read. None reads every column.

        Returns:
            The row, or None if no row matches.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement a `select_one` method.")

    @abstractmethod
    def select_many(self, table: Table, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Read every row matching some criteria.

        Args:
            table: The resolved table.
            criteria: The criteria to match. None reads every row.

        Returns:
            The matching rows (possibly empty).
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement a `select_many` method.")

    @abstractmethod
    def update(self, table: Table, row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
        """
        Overwrite the rows matching some criteria with the values of `row`.

        Args:
            table: The resolved table.
            row: The new column values.
            criteria: The criteria selecting the rows to update.

        Returns:
            True if at least one row was updated.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement an `update` method.")

    @abstractmethod
    def delete(self, table: Table, criteria: Mapping[str, Any]) -> bool:
        """
        Delete the rows matching some criteria.

        Args:
            table: The resolved table.
            criteria: The criteria selecting the rows to delete.

        Returns:
            True if at least one row was deleted.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement a `delete` method.")

    @abstractmethod
    def schema_helper(self, entity_type: type) -> "SchemaHelper":
        """
        Build the schema helper of an entity type for this storage.

        Args:
            entity_type: The `Row` subclass whose table is managed.

        Returns:
            A [`SchemaHelper`][backends.schema_helper.SchemaHelper] bound to this executor.
        """
        raise NotImplementedError("Subclasses of `StorageExecutor` must implement a `schema_helper` method.")
