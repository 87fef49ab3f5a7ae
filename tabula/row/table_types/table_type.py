##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `TableType` abstract base class, the contract every
column type adapter in Tabula implements.

A table type converts one domain value type to and from one storage
representation and declares two descriptors:

- `domain_type`: the name of the Python type it produces and consumes
- `storage_type`: a dialect-agnostic storage mnemonic (e.g. "INTEGER(10)")
  that is only read by schema helpers when they emit DDL
"""

from abc import ABC, abstractmethod
from typing import Any


class TableType(ABC):
    """
    Base class for all table types supported in Tabula.

    `None` is passed through unchanged in both directions so that nullable
    columns never reach the concrete conversion methods. Whether `None` is
    acceptable is a column concern, not a type concern.

    Attributes:
        storage_type (str): The storage type mnemonic used when emitting DDL.
        domain_type (str): The name of the Python type handled by this table type.

    Methods:
        to_domain: Convert a storage value into a domain value.
        to_storage: Convert a domain value into a storage value.
        _to_domain: Conversion hook implemented by subclasses.
        _to_storage: Conversion hook implemented by subclasses.
    """

    def __init__(self, storage_type: str, domain_type: str):
        """
        Initialize the table type with its storage and domain type descriptors.

        Args:
            storage_type: The storage type mnemonic (e.g. "VARCHAR(255)").
            domain_type: The name of the Python type handled by this table type (e.g. "str").
        """
        self._storage_type: str = storage_type
        self._domain_type: str = domain_type

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(storage_type={self._storage_type!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableType):
            return NotImplemented
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash((type(self), self._storage_type))

    @property
    def storage_type(self) -> str:
        """
        Get the storage type mnemonic of this table type.

        Returns:
            The storage type (e.g. "INTEGER(10)").
        """
        return self._storage_type

    @property
    def domain_type(self) -> str:
        """
        Get the name of the Python type handled by this table type.

        Returns:
            The domain type name (e.g. "int").
        """
        return self._domain_type

    def to_domain(self, storage_value: Any) -> Any:
        """
        Convert a value as read from storage into its domain value.

        Args:
            storage_value: The raw value retrieved from storage.

        Returns:
            The domain value, or None if `storage_value` is None.

        Raises:
            (exceptions.DecodeError): If `storage_value` is malformed for this type.
        """
        if storage_value is None:
            return None
        return self._to_domain(storage_value)

    def to_storage(self, domain_value: Any) -> Any:
        """
        Convert a domain value into its storage representation.

        Args:
            domain_value: The value held by the entity.

        Returns:
            The storage value, or None if `domain_value` is None.
        """
        if domain_value is None:
            return None
        return self._to_storage(domain_value)

    @abstractmethod
    def _to_domain(self, storage_value: Any) -> Any:
        """
        Convert a non-null storage value into its domain value.

        Args:
            storage_value: The raw value retrieved from storage.

        Returns:
            The domain value.
        """
        raise NotImplementedError("Subclasses of `TableType` must implement a `_to_domain` method.")

    @abstractmethod
    def _to_storage(self, domain_value: Any) -> Any:
        """
        Convert a non-null domain value into its storage representation.

        Args:
            domain_value: The value held by the entity.

        Returns:
            The storage value.
        """
        raise NotImplementedError("Subclasses of `TableType` must implement a `_to_storage` method.")
