##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `CachedEntry` class, one value held by a
[`Cache`][cache.cache.Cache] with its synchronization flag.
"""

from typing import Generic, TypeVar


T = TypeVar("T")


class CachedEntry(Generic[T]):
    """
    A cached value and whether it matches storage.

    Changing `value` in place never changes the flag; only `update` and
    `persist` do.

    Attributes:
        value (T): The cached value.

    Methods:
        pending: Build an entry holding changes not yet written to storage.
        sync: Build an entry matching storage.
        synchronized: Check whether the entry matches storage.
        update: Mark the entry as pending.
        persist: Mark the entry as matching storage.
    """

    def __init__(self, value: T, synchronized: bool):
        """
        Args:
            value: The cached value.
            synchronized: Whether the value matches storage.
        """
        self.value: T = value
        self._synchronized: bool = synchronized

    def __repr__(self) -> str:
        return f"CachedEntry(value={self.value!r}, synchronized={self._synchronized})"

    @classmethod
    def pending(cls, value: T) -> "CachedEntry[T]":
        """
        Build an entry holding changes not yet written to storage.

        Args:
            value: The cached value.

        Returns:
            A pending entry.
        """
        return cls(value, False)

    @classmethod
    def sync(cls, value: T) -> "CachedEntry[T]":
        """
        Build an entry matching storage.

        Args:
            value: The cached value.

        Returns:
            A synchronized entry.
        """
        return cls(value, True)

    def synchronized(self) -> bool:
        """
        Check whether the entry matches storage.

        Returns:
            True if the entry is synchronized, False if it is pending.
        """
        return self._synchronized

    def update(self) -> "CachedEntry[T]":
        """
        Mark the entry as pending.

        Returns:
            This entry.
        """
        self._synchronized = False
        return self

    def persist(self) -> "CachedEntry[T]":
        """
        Mark the entry as matching storage.

        Returns:
            This entry.
        """
        self._synchronized = True
        return self
