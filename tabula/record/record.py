##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `Record` class, a `Row` that saves and loads itself.

A record tracks three flags:

- `is_empty`: the record was built without primary key values. Fixed at construction.
- `exists_in_storage`: a row with the record's primary key was found or written.
- `is_synced`: the fields of the record match the row last read or written.

Every lifecycle operation checks these flags before reaching storage, so a
call that cannot apply returns False without any storage call.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar

from tabula.backends.schema_helper import SchemaHelper
from tabula.backends.storage_executor import StorageExecutor
from tabula.crud_helper import CrudHelper
from tabula.exceptions import ConfigurationError
from tabula.record.record_manager import RecordManager, SchemaFactory
from tabula.row.row import Row


LOG = logging.getLogger(__name__)

T = TypeVar("T", bound="Record")


class Record(Row):
    """
    A `Row` bound to a [`RecordManager`][record.record_manager.RecordManager].

    Subclasses declare their metadata with [`entity`][row.metadata.entity] like
    any other `Row`.

    Attributes:
        manager (Optional[RecordManager]): The helpers used by the lifecycle operations.
            None for a detached record built with `blank`.
        is_empty (bool): Whether the record was built without primary key values.
        exists_in_storage (bool): Whether a matching row is known to exist in storage.
        is_synced (bool): Whether the fields match the row last read or written.

    Methods:
        load: Build a record wired to an executor.
        blank: Build a detached record to be hydrated from a storage row.
        get_crud_helper: Get the CRUD helper of the record.
        get_schema_helper: Get the schema helper of the record.
        synced: Get the synchronization state of the record.
        insert: Insert the record.
        update: Write the record over its row.
        upsert: Update the record if it exists, else insert it.
        delete: Delete the row of the record.
        reload: Read the record back from storage.
        create_table: Create the table of the record type.
        drop_table: Drop the table of the record type.
    """

    def __init__(self, manager: Optional[RecordManager] = None, primary: Optional[Mapping[str, Any]] = None, **fields):
        """
        Build the record and try to read it from storage.

        Args:
            manager: The helpers used by the lifecycle operations.
            primary: Map of primary key column name to value. Without it the
                record is empty and storage is not queried.
            fields: Column values keyed by column name.
        """
        super().__init__(primary, **fields)
        self.manager: Optional[RecordManager] = manager
        self.is_empty: bool = not primary
        self.exists_in_storage: bool = False
        self.is_synced: bool = False
        if manager is not None:
            self.reload()

    @classmethod
    def load(
        cls: Type[T], executor: StorageExecutor, schema_factory: Optional[SchemaFactory] = None, *args, **kwargs
    ) -> T:
        """
        Build a record wired to an executor.

        Args:
            executor: The executor running every storage operation.
            schema_factory: Builds the schema helper from the executor and the
                record type. Defaults to the schema helper of the executor.
            args: More positional constructor arguments (the primary key mapping first).
            kwargs: More keyword constructor arguments.

        Returns:
            The record, already reloaded from storage when it has primary key values.
        """
        return cls(RecordManager.create(cls, executor, schema_factory), *args, **kwargs)

    @classmethod
    def blank(cls: Type[T]) -> T:
        """
        Build a detached record to be hydrated from a storage row.

        A detached record has no manager, so its lifecycle operations raise
        until a manager is assigned.

        Returns:
            A new, empty and detached record.
        """
        return cls()

    def _require_manager(self) -> RecordManager:
        if self.manager is None:
            raise ConfigurationError(f"{self!r} is not bound to a RecordManager.")
        return self.manager

    def get_crud_helper(self) -> CrudHelper:
        """
        Get the CRUD helper of the record.

        Returns:
            The helper running create/read/update/delete operations.
        """
        return self._require_manager().crud

    def get_schema_helper(self) -> SchemaHelper:
        """
        Get the schema helper of the record.

        Returns:
            The helper creating and dropping the table.
        """
        return self._require_manager().schema

    def synced(self) -> Optional[bool]:
        """
        Get the synchronization state of the record.

        Returns:
            None for an empty record, else whether the record exists in storage
            and matches the row last read or written.
        """
        if self.is_empty:
            return None
        return self.exists_in_storage and self.is_synced

    def insert(self) -> bool:
        """
        Insert the record.

        Nothing happens for an empty record or one that already exists in storage.

        Returns:
            True if the row was inserted.
        """
        if self.is_empty or self.exists_in_storage:
            return False

        self.is_synced = False
        inserted = self.get_crud_helper().create_one(self) is not None
        if inserted:
            self.is_synced = True
            self.exists_in_storage = True
        else:
            LOG.warning(f"Failed to insert {self!r}.")
        return inserted

    def update(self) -> bool:
        """
        Write the record over its row.

        Nothing happens for an empty record or one that does not exist in storage.

        Returns:
            True if the row was updated.
        """
        if self.is_empty or not self.exists_in_storage:
            return False

        self.is_synced = False
        updated = self.get_crud_helper().update_one(self)
        if updated:
            self.is_synced = True
        return updated

    def upsert(self) -> bool:
        """
        Update the record if it exists in storage, else insert it.

        Returns:
            True if the row was updated or inserted.
        """
        if self.exists_in_storage:
            return self.update()
        return self.insert()

    def delete(self) -> bool:
        """
        Delete the row of the record.

        Nothing happens for a record that does not exist in storage. On success
        the record no longer exists in storage and forgets the primary key it
        was loaded with, so it can be inserted again.

        Returns:
            True if a row was deleted.
        """
        if not self.exists_in_storage:
            return False

        self.is_synced = False
        deleted = self.get_crud_helper().delete_one(self)
        if deleted:
            self.exists_in_storage = False
            self._former_primary = {}
        return deleted

    def reload(self, criteria: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Read the record back from storage.

        Without criteria, a synced record is left untouched and the row is
        selected by the current primary key. An empty record is not looked up.

        Args:
            criteria: The criteria selecting the row to read.

        Returns:
            True if a row was found and the record hydrated from it.
        """
        crud = self.get_crud_helper()
        if criteria is None:
            if self.is_synced:
                return True
            if self.is_empty:
                self.exists_in_storage = False
                return False
            criteria = crud.primary_key_values_to_criteria(self.get_primary())

        row = crud.read(criteria)
        if not row:
            LOG.debug(f"No '{crud.table.name}' row matches {criteria}.")
            self.exists_in_storage = False
            self.is_synced = False
            return False

        self.from_storage_row(row, from_storage=True)
        self.is_synced = True
        self.exists_in_storage = True
        return True

    def create_table(self) -> bool:
        """
        Create the table of the record type.

        Returns:
            True if the table exists once the call returns.
        """
        return self.get_schema_helper().create_table()

    def drop_table(self) -> bool:
        """
        Drop the table of the record type.

        Returns:
            True if the table no longer exists once the call returns.
        """
        return self.get_schema_helper().drop_table()
