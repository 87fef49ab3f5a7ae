##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module defines the `Cache` class, a write-back cache of entities keyed by
their primary string.

Entries read from storage are *synchronized*; entries set locally are *pending*
until `persist_all` writes them. Bulk loads and `clear` replace entries without
writing anything, so pending changes they replace are lost. A warning is logged
when that happens unless `cache.warn_on_discard` is turned off in the
configuration.
"""

import logging
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, TypeVar

from tabula.cache.cached_entry import CachedEntry
from tabula.crud_helper import CrudHelper
from tabula.utils import split_primary_string


T = TypeVar("T")

LOG = logging.getLogger(__name__)


def _warn_on_discard_default() -> bool:
    from tabula.config.configfile import get_active_config  # pylint: disable=import-outside-toplevel

    cache_settings = get_active_config().cache
    return bool(getattr(cache_settings, "warn_on_discard", True))


class Cache(Generic[T]):
    """
    Write-back cache of entities over a [`CrudHelper`][crud_helper.CrudHelper].

    Generic Parameters:
        T (Row): The entity type held by the cache.

    Attributes:
        crud (CrudHelper): The helper used to read and write entities.
        warn_on_discard (bool): Whether replacing or dropping pending entries logs a warning.
        _entries (Dict[str, CachedEntry]): The cached entries keyed by primary string.

    Methods:
        get: Get an entity, reading it from storage on a miss.
        set: Store an entity as pending.
        update: Mark a cached entity as pending.
        get_pending: Get every pending entry.
        load: Store entities as synchronized entries.
        load_all: Load every entity of the table.
        load_by_criteria: Load the entities matching some criteria.
        clear: Drop every entry.
        persist_all: Write every pending entry to storage.
    """

    def __init__(self, crud: CrudHelper, warn_on_discard: Optional[bool] = None):
        """
        Args:
            crud: The helper used to read and write entities.
            warn_on_discard: Whether replacing or dropping pending entries logs a
                warning. Defaults to the `cache.warn_on_discard` setting.
        """
        self.crud: CrudHelper = crud
        self.warn_on_discard: bool = _warn_on_discard_default() if warn_on_discard is None else warn_on_discard
        self._entries: Dict[str, CachedEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[T]:
        """
        Get an entity, reading it from storage on a miss.

        On a miss the key is turned into primary key values and the entity is
        read from storage. A single-column key is used as it is; a composite
        key is split on its unescaped separators and must give one value per
        primary key column, else nothing is read. A hit is cached as
        synchronized; a miss is not cached, so the next call queries storage
        again.

        Args:
            key: The primary string of the entity.

        Returns:
            The entity, or None if it is neither cached nor in storage.
        """
        if key in self._entries:
            return self._entries[key].value

        primary_keys = self.crud.table.primary_keys
        values = [key] if len(primary_keys) == 1 else split_primary_string(key)
        if len(values) != len(primary_keys):
            LOG.debug(f"Key '{key}' does not match the {len(primary_keys)} primary keys of '{self.crud.table.name}'.")
            return None

        LOG.debug(f"Cache miss for '{key}'. Reading from '{self.crud.table.name}'...")
        value = self.crud.read_one(values)
        if value is None:
            return None
        self._entries[key] = CachedEntry.sync(value)
        return value

    def set(self, key: str, value: T):
        """
        Store an entity as pending, replacing any entry with the same key.

        Args:
            key: The primary string of the entity.
            value: The entity.
        """
        self._entries[key] = CachedEntry.pending(value)

    def update(self, key: str) -> bool:
        """
        Mark a cached entity as pending, after it was changed in place.

        Args:
            key: The primary string of the entity.

        Returns:
            True if the key was cached.
        """
        entry = self._entries.get(key)
        if entry is None:
            LOG.warning(f"Cannot mark '{key}' as pending: it is not cached.")
            return False
        entry.update()
        return True

    def get_pending(self) -> Dict[str, CachedEntry[T]]:
        """
        Get every pending entry.

        Returns:
            The pending entries keyed by primary string.
        """
        return {key: entry for key, entry in self._entries.items() if not entry.synchronized()}

    def load(self, entities: Iterable[T]):
        """
        Store entities as synchronized entries keyed by their primary string.

        Any entry with the same key is replaced, pending or not.

        Args:
            entities: The entities, usually read from storage.
        """
        discarded = []
        for value in entities:
            key = value.get_primary_string()
            existing = self._entries.get(key)
            if existing is not None and not existing.synchronized():
                discarded.append(key)
            self._entries[key] = CachedEntry.sync(value)

        if discarded and self.warn_on_discard:
            LOG.warning(f"Loading entities discarded pending changes for keys: {discarded}")

    def load_all(self):
        """
        Load every entity of the table.
        """
        self.load(self.crud.list_all())

    def load_by_criteria(self, criteria: Mapping[str, Any]):
        """
        Load the entities matching some criteria.

        Args:
            criteria: The criteria to match.
        """
        self.load(self.crud.read_many(criteria))

    def clear(self):
        """
        Drop every entry. Nothing is written to storage.
        """
        pending = list(self.get_pending())
        if pending and self.warn_on_discard:
            LOG.warning(f"Clearing the cache discarded pending changes for keys: {pending}")
        self._entries = {}

    def persist_all(self) -> List[str]:
        """
        Write every pending entry to storage with `update_one`.

        Entries whose update affected a row become synchronized. The others
        stay pending.

        Returns:
            The keys of the entries that stay pending.
        """
        failed = []
        for key, entry in self.get_pending().items():
            if self.crud.update_one(entry.value):
                entry.persist()
            else:
                failed.append(key)

        if failed:
            LOG.warning(f"No row was updated for keys {failed}. These entries remain pending.")
        return failed
