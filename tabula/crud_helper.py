##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `CrudHelper` class, the generic create/read/update/delete
layer of Tabula.

A `CrudHelper` is bound to one entity type. It dehydrates entities into storage
rows, hands them to a [`StorageExecutor`][backends.storage_executor.StorageExecutor]
and hydrates the rows the executor returns. No entity type writes its own
storage queries.
"""

import logging
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from tabula.backends.criteria import Criteria, as_criteria
from tabula.backends.storage_executor import StorageExecutor
from tabula.exceptions import ConfigurationError, IntegrityError
from tabula.row.attributes import Table
from tabula.row.identifiers import HasPublicId
from tabula.row.metadata import ResolvedMetadata
from tabula.row.row import Row
from tabula.row.row import instantiate_from_row as _instantiate_from_row


R = TypeVar("R", bound=Row)

LOG = logging.getLogger(__name__)


class CrudHelper(Generic[R]):
    """
    Generic CRUD operations for one entity type, run through a storage executor.

    Generic Parameters:
        R (Row): The entity type managed by this helper.

    Attributes:
        entity_type (Type[Row]): The entity type managed by this helper.
        executor (StorageExecutor): The executor running the storage operations.
        insert_excluded_columns (Tuple[str, ...]): Columns left out of inserted rows.
        update_excluded_columns (Tuple[str, ...]): Columns left out of updated rows.

    Methods:
        table: Get the resolved table of the entity type.
        create_one: Insert one entity.
        create_many: Insert several entities, all or nothing.
        read: Read one raw storage row.
        read_one: Read one entity by its primary key values.
        read_one_by: Read the first entity matching some criteria.
        read_many: Read every entity matching some criteria.
        list_all: Read every entity of the table.
        update_one: Write an entity over the row addressed by its current primary key.
        delete_one: Delete the row addressed by an entity's current primary key.
        primary_key_values_to_criteria: Zip primary key values onto the primary key columns.
        instantiate_from_row: Build an entity and hydrate it from a storage row.
    """

    def __init__(
        self,
        entity_type: Type[R],
        executor: StorageExecutor,
        insert_excluded_columns: Iterable[str] = (),
        update_excluded_columns: Iterable[str] = (),
    ):
        """
        Bind the helper to an entity type and check that the type can be mapped.

        Args:
            entity_type: The `Row` subclass managed by this helper.
            executor: The executor running the storage operations.
            insert_excluded_columns: Columns left out of inserted rows.
            update_excluded_columns: Columns left out of updated rows.

        Raises:
            (exceptions.ConfigurationError): If `entity_type` is not a `Row` subclass
                or one of its primary keys is not a declared column.
            (exceptions.SchemaError): If no table is declared for `entity_type`.
        """
        if not isinstance(entity_type, type) or not issubclass(entity_type, Row):
            raise ConfigurationError(f"{entity_type!r} is not a subclass of Row and cannot be mapped to storage.")

        metadata = entity_type.metadata()
        for primary_key in metadata.primary_keys:
            if metadata.get_column(primary_key) is None:
                raise ConfigurationError(
                    f"Primary key '{primary_key}' of '{entity_type.__name__}' is not a declared column."
                )

        self.entity_type: Type[R] = entity_type
        self.executor: StorageExecutor = executor
        self.insert_excluded_columns: Tuple[str, ...] = tuple(insert_excluded_columns)
        self.update_excluded_columns: Tuple[str, ...] = tuple(update_excluded_columns)

    @property
    def metadata(self) -> ResolvedMetadata:
        """The resolved metadata of the entity type."""
        return self.entity_type.metadata()

    @property
    def table(self) -> Table:
        """The resolved table of the entity type."""
        return self.metadata.table

    @staticmethod
    def _without(row: Dict[str, Any], excluded: Tuple[str, ...]) -> Dict[str, Any]:
        return {column: value for column, value in row.items() if column not in excluded}

    def _write_back_generated_key(self, entity: R, key: str):
        """
        Store a key generated by the storage into the auto column of an entity.

        Args:
            entity: The inserted entity.
            key: The key returned by the executor.
        """
        auto_column = self.table.auto_column
        value = self.metadata.get_column(auto_column).to_domain(key)
        if self.metadata.is_primary_key(auto_column):
            primary = entity.get_primary()
            primary[auto_column] = value
            entity.set_primary(primary)
        else:
            self.metadata.accessors[auto_column].set(entity, value)
        LOG.debug(f"Generated '{auto_column}' value {value!r} written back to {entity!r}.")

    def _needs_generated_key(self, entity: R) -> bool:
        auto_column = self.table.auto_column
        if auto_column is None:
            return False
        if self.metadata.is_primary_key(auto_column):
            return entity.get_primary().get(auto_column) is None
        return self.metadata.accessors[auto_column].get(entity) is None

    def _guard_insert(self, entity: R):
        """
        Refuse to insert an entity that was loaded from storage.

        Args:
            entity: The entity about to be inserted.

        Raises:
            (exceptions.IntegrityError): If the entity has former primary key values.
        """
        if entity.get_former_primary():
            raise IntegrityError(
                f"Row with primary string '{entity.get_primary_string()}' cannot be inserted "
                "as it has been loaded from storage."
            )

    def create_one(self, entity: R) -> Optional[str]:
        """
        Insert one entity.

        When the table has an auto column and the entity holds no value for it,
        the key generated by the storage is written back into the entity.

        Args:
            entity: The entity to insert.

        Returns:
            The public id for entities exposing one, else the key returned by
            the executor. None if the executor did not insert the row.

        Raises:
            (exceptions.IntegrityError): If the entity was loaded from storage.
        """
        self._guard_insert(entity)
        needs_key = self._needs_generated_key(entity)
        row = self._without(entity.to_storage_row(), self.insert_excluded_columns)

        LOG.debug(f"Inserting {entity!r} into '{self.table.name}'...")
        key = self.executor.insert(self.table, row)
        if key is None:
            return None

        if needs_key:
            self._write_back_generated_key(entity, key)
        if isinstance(entity, HasPublicId):
            return entity.get_public_id()
        return key

    def create_many(self, entities: Iterable[R]) -> bool:
        """
        Insert several entities. Either every entity is inserted or none is.

        Args:
            entities: The entities to insert.

        Returns:
            True if every entity was inserted.

        Raises:
            (exceptions.IntegrityError): If one of the entities was loaded from storage.
        """
        entities = list(entities)
        for entity in entities:
            self._guard_insert(entity)
        rows = [self._without(entity.to_storage_row(), self.insert_excluded_columns) for entity in entities]
        LOG.debug(f"Inserting {len(rows)} rows into '{self.table.name}'...")
        return self.executor.insert_many(self.table, rows)

    def read(
        self, criteria: Mapping[str, Any], columns: Optional[Union[str, Iterable[str]]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Read one raw storage row.

        Args:
            criteria: The criteria to match.
            columns: A column name or list of column names to read. None reads every column.

        Returns:
            The storage row, or None if no row matches.
        """
        return self.executor.select_one(self.table, as_criteria(criteria), columns)

    def read_one(self, primary_key_values: Union[Sequence[Any], Mapping[str, Any]]) -> Optional[R]:
        """
        Read one entity by its primary key values.

        Args:
            primary_key_values: The primary key values, in primary key order.

        Returns:
            The hydrated entity, or None if no row matches.
        """
        return self.read_one_by(self.primary_key_values_to_criteria(primary_key_values))

    def read_one_by(self, criteria: Mapping[str, Any]) -> Optional[R]:
        """
        Read the first entity matching some criteria.

        Args:
            criteria: The criteria to match.

        Returns:
            The entity hydrated with storage provenance, or None if no row matches.
        """
        row = self.read(criteria)
        if not row:
            return None
        return self.instantiate_from_row(self.entity_type, row, True)

    def read_many(self, criteria: Optional[Mapping[str, Any]] = None) -> List[R]:
        """
        Read every entity matching some criteria.

        Args:
            criteria: The criteria to match. None matches every row.

        Returns:
            The entities hydrated with storage provenance.
        """
        rows = self.executor.select_many(self.table, as_criteria(criteria))
        return [self.instantiate_from_row(self.entity_type, row, True) for row in rows]

    def list_all(self) -> List[R]:
        """
        Read every entity of the table.

        Returns:
            The entities hydrated with storage provenance.
        """
        return self.read_many()

    def update_one(self, entity: R) -> bool:
        """
        Write an entity over the row addressed by its current primary key.

        Args:
            entity: The entity to write.

        Returns:
            True if a row was updated.
        """
        criteria = self.primary_key_values_to_criteria(entity.get_primary())
        row = self._without(entity.to_storage_row(), self.update_excluded_columns)
        LOG.debug(f"Updating '{self.table.name}' rows matching {criteria}...")
        return self.executor.update(self.table, row, criteria)

    def delete_one(self, entity: R) -> bool:
        """
        Delete the row addressed by the current primary key of an entity.

        Args:
            entity: The entity whose row is deleted.

        Returns:
            True if a row was deleted.
        """
        criteria = self.primary_key_values_to_criteria(entity.get_primary())
        LOG.debug(f"Deleting '{self.table.name}' rows matching {criteria}...")
        return self.executor.delete(self.table, criteria)

    def primary_key_values_to_criteria(self, values: Union[Sequence[Any], Mapping[str, Any]]) -> Criteria:
        """
        Zip primary key values onto the primary key columns, by position.

        The values must follow the order of the table's primary keys. Missing
        values become None and extra values are ignored. A mapping is read by
        primary key column name instead.

        Args:
            values: The primary key values.

        Returns:
            The criteria selecting the row with those primary key values.
        """
        if isinstance(values, Mapping):
            values = [values.get(primary_key) for primary_key in self.table.primary_keys]
        elif isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = [values]
        else:
            values = list(values)

        conditions = {}
        for position, primary_key in enumerate(self.table.primary_keys):
            conditions[primary_key] = values[position] if position < len(values) else None
        return Criteria(conditions)

    @staticmethod
    def instantiate_from_row(
        entity_type: Type[R], row: Mapping[str, Any], from_storage: bool = False, *args, **kwargs
    ) -> R:
        """
        Build an entity and hydrate it from a storage row.

        Args:
            entity_type: The `Row` subclass to instantiate.
            row: A mapping of column name to storage value.
            from_storage: Whether the row was read from storage.
            args: Positional constructor arguments.
            kwargs: Keyword constructor arguments.

        Returns:
            The hydrated entity.
        """
        return _instantiate_from_row(entity_type, row, from_storage, *args, **kwargs)
