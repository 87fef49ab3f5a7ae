##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `Row` base class, the generic mapper between an entity
instance and a flat storage row.

A `Row` subclass declares its metadata with the
[`entity`][row.metadata.entity] decorator. The `Row` then:

- dehydrates the instance into a storage row (`to_storage_row`),
- hydrates the instance from a storage row (`from_storage_row`),
- tracks the *current* primary key values apart from the *former* primary key
  values (the values as last loaded from storage).

The former primary key is empty until the instance is hydrated with storage
provenance. Editing fields or the current primary key never changes it.
"""

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from tabula.exceptions import MappingError
from tabula.row.attributes import Column, ForeignKey, Index, Table
from tabula.row.metadata import ResolvedMetadata, resolve_metadata
from tabula.utils import join_primary_string


R = TypeVar("R", bound="Row")


def primary_property(name: str, doc: str = None) -> property:
    """
    Expose a primary key column as a plain attribute.

    Reading the attribute returns the current primary key value of the
    column; assigning it writes into the current primary key.

    Args:
        name: The primary key column name.
        doc: Optional docstring of the property.

    Returns:
        A property reading and writing `name` in the current primary key.
    """

    def getter(self) -> Any:
        return self._primary.get(name)

    def setter(self, value: Any):
        self._primary[name] = value

    return property(getter, setter, doc=doc or f"The `{name}` primary key value.")


class Row:
    """
    Base class of every mapped entity type.

    Attributes:
        _primary (Dict[str, Any]): The current primary key values, keyed by column name.
        _former_primary (Dict[str, Any]): The primary key values as last loaded from
            storage. Empty if the instance was never hydrated from storage.

    Methods:
        metadata: Get the resolved metadata of this entity type.
        get_table: Get the resolved table of this entity type.
        get_primary_keys: Get the primary key column names of this entity type.
        get_columns: Get the resolved columns of this entity type.
        get_column_definitions: Get the column definitions keyed by column name.
        get_indexes: Get the resolved indexes of this entity type.
        get_foreign_keys: Get the resolved foreign keys of this entity type.
        blank: Build an instance to be hydrated from a storage row.
        to_storage_row: Dehydrate this instance into a storage row.
        from_storage_row: Hydrate this instance from a storage row.
        get_primary: Get the current primary key mapping.
        get_former_primary: Get the former primary key mapping.
        set_primary: Replace the current primary key mapping.
        reset_primary: Discard local edits of the primary key.
        primary_key_values: Get the current primary key values in key order.
        former_primary_key_values: Get the former primary key values in key order.
        get_primary_string: Join the current primary key values into one string.
    """

    def __init__(self, primary: Optional[Mapping[str, Any]] = None, **fields):
        """
        Initialize the row with optional primary key values and field values.

        Non-key fields that are not given and not already set are initialised
        from their column default.

        Args:
            primary: Map of primary key column name to value.
            fields: Column values keyed by column name. Primary key columns are
                written into the current primary key.

        Raises:
            (exceptions.MappingError): If a field is not a declared column.
        """
        self._primary: Dict[str, Any] = dict(primary or {})
        self._former_primary: Dict[str, Any] = {}
        self._apply_defaults()
        for name, value in fields.items():
            self._assign(name, value)

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={value!r}" for name, value in self._field_values().items())
        return f"{self.__class__.__name__}({values})"

    @classmethod
    def metadata(cls) -> ResolvedMetadata:
        """
        Get the resolved metadata of this entity type.

        Returns:
            The cached resolved metadata.
        """
        return resolve_metadata(cls)

    @classmethod
    def get_table(cls) -> Table:
        """
        Get the resolved table of this entity type.

        Returns:
            The table, with a concrete name.
        """
        return cls.metadata().table

    @classmethod
    def get_primary_keys(cls) -> Tuple[str, ...]:
        """
        Get the primary key column names of this entity type.

        Returns:
            The primary key column names, in order.
        """
        return cls.metadata().primary_keys

    @classmethod
    def get_columns(cls) -> Tuple[Column, ...]:
        """
        Get the resolved columns of this entity type.

        Returns:
            Every resolved column, in encounter order.
        """
        return cls.metadata().columns

    @classmethod
    def get_column_definitions(cls) -> Dict[str, Column]:
        """
        Get the column definitions keyed by column name.

        Returns:
            A dict of column name to column. The last declaration of a name wins.
        """
        return cls.metadata().column_definitions

    @classmethod
    def get_indexes(cls) -> Tuple[Index, ...]:
        """
        Get the resolved indexes of this entity type.

        Returns:
            Every resolved index, in encounter order.
        """
        return cls.metadata().indexes

    @classmethod
    def get_foreign_keys(cls) -> Tuple[ForeignKey, ...]:
        """
        Get the resolved foreign keys of this entity type.

        Returns:
            Every resolved foreign key, in encounter order.
        """
        return cls.metadata().foreign_keys

    @classmethod
    def blank(cls: Type[R]) -> R:
        """
        Build an instance to be hydrated from a storage row.

        Subclasses whose constructor needs arguments override this.

        Returns:
            A new instance of this entity type.
        """
        return cls()

    def _apply_defaults(self):
        """
        Initialise unset non-key fields from their column default.
        """
        metadata = self.metadata()
        for column in metadata.columns:
            if column.default is None or metadata.is_primary_key(column.name):
                continue
            accessor = metadata.accessors[column.name]
            if accessor.get(self) is None:
                accessor.set(self, deepcopy(column.default))

    def _assign(self, column_name: str, value: Any):
        """
        Write a domain value into the primary key or into the field of a column.

        Args:
            column_name: The column name.
            value: The domain value.

        Raises:
            (exceptions.MappingError): If `column_name` is not a declared column.
        """
        metadata = self.metadata()
        if metadata.is_primary_key(column_name):
            self._primary[column_name] = value
            return
        accessor = metadata.accessors.get(column_name)
        if accessor is None:
            raise MappingError(f"'{self.__class__.__name__}' has no column named '{column_name}'.")
        accessor.set(self, value)

    def _field_values(self) -> Dict[str, Any]:
        metadata = self.metadata()
        values = {}
        for column in metadata.columns:
            if metadata.is_primary_key(column.name):
                values[column.name] = self._primary.get(column.name)
            else:
                values[column.name] = metadata.accessors[column.name].get(self)
        return values

    def to_storage_row(self) -> Dict[str, Any]:
        """
        Dehydrate this instance into a storage row.

        Primary key columns are read from the current primary key, every other
        column from its field (None when unset). Each value is converted with
        its column's table type.

        Returns:
            A dict of column name to storage value, in column order.
        """
        storage_row = {}
        for column_name, value in self._field_values().items():
            column = self.metadata().get_column(column_name)
            storage_row[column_name] = column.to_storage(value)
        return storage_row

    def from_storage_row(self, row: Mapping[str, Any], from_storage: bool = False):
        """
        Hydrate this instance from a storage row.

        The current and former primary keys are reset first. Primary key values
        are written into the current primary key and, when `from_storage` is
        True, into the former primary key as well. Other values are written into
        their fields.

        Args:
            row: A mapping of column name to storage value.
            from_storage: Whether the row was read from storage.

        Raises:
            (exceptions.MappingError): If the row holds a column that is not declared.
            (exceptions.DecodeError): If a storage value cannot be converted.
        """
        metadata = self.metadata()
        self._primary = {}
        self._former_primary = {}
        for column_name, storage_value in row.items():
            column = metadata.get_column(column_name)
            if column is None:
                raise MappingError(
                    f"Cannot hydrate '{self.__class__.__name__}': no column named '{column_name}' is declared."
                )
            value = column.to_domain(storage_value)
            if metadata.is_primary_key(column_name):
                self._primary[column_name] = value
                if from_storage:
                    self._former_primary[column_name] = value
                continue
            metadata.accessors[column_name].set(self, value)

    def get_primary(self) -> Dict[str, Any]:
        """
        Get the current primary key mapping.

        Returns:
            A copy of the current primary key, keyed by column name.
        """
        return dict(self._primary)

    def get_former_primary(self) -> Dict[str, Any]:
        """
        Get the primary key mapping as last loaded from storage.

        Returns:
            A copy of the former primary key. Empty if never loaded from storage.
        """
        return dict(self._former_primary)

    def set_primary(self, primary: Mapping[str, Any]):
        """
        Replace the current primary key mapping.

        Args:
            primary: Map of primary key column name to value.
        """
        self._primary = dict(primary)

    def reset_primary(self):
        """
        Overwrite the current primary key with the former primary key.
        """
        self._primary = dict(self._former_primary)

    @staticmethod
    def _ordered_values(primary: Mapping[str, Any], primary_keys: Tuple[str, ...]) -> List[Any]:
        return [primary[name] for name in primary_keys if name in primary]

    def primary_key_values(self) -> List[Any]:
        """
        Get the current primary key values.

        Returns:
            The values ordered by the table's primary keys. Empty when no
            primary key value is set.
        """
        return self._ordered_values(self._primary, self.get_primary_keys())

    def former_primary_key_values(self) -> List[Any]:
        """
        Get the primary key values as last loaded from storage.

        Returns:
            The values ordered by the table's primary keys. Empty if the
            instance was never hydrated from storage.
        """
        return self._ordered_values(self._former_primary, self.get_primary_keys())

    def get_primary_string(self) -> str:
        """
        Join the current primary key values into one string.

        A single key value is returned as its string. Several values are joined
        with `-`, and a `-` or `\\` inside a value is escaped with `\\`, so
        [`split_primary_string`][utils.split_primary_string] gives them back.

        Returns:
            The primary key string.
        """
        return join_primary_string(self.primary_key_values())


def instantiate_from_row(
    entity_type: Type[R], row: Mapping[str, Any], from_storage: bool = False, *args, **kwargs
) -> R:
    """
    Build an entity and hydrate it from a storage row.

    Args:
        entity_type: The `Row` subclass to instantiate.
        row: A mapping of column name to storage value.
        from_storage: Whether the row was read from storage.
        args: Positional constructor arguments. When neither `args` nor `kwargs`
            are given, the instance comes from `entity_type.blank()`.
        kwargs: Keyword constructor arguments.

    Returns:
        The hydrated entity.
    """
    instance = entity_type(*args, **kwargs) if args or kwargs else entity_type.blank()
    instance.from_storage_row(row, from_storage)
    return instance
