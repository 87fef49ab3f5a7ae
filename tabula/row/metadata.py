##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Metadata declaration and resolution for entity types.

Entity types declare their metadata explicitly with the `entity` class
decorator, which registers a `MetadataFragment` for the class. Reusable
fragments (e.g. an integer `id` column with its unique index) are plain
`MetadataFragment` values composed into an entity through the `fragments`
argument.

The `MetadataResolver` merges, strictly left to right:

1. every fragment composed into the type, in declaration order,
2. the merged metadata of the type's mapped ancestor, if any,
3. the metadata declared on the type itself.

Later declarations win for the table name and auto column; primary keys,
columns, indexes and foreign keys are concatenated. The result is cached per
type for the lifetime of the process.
"""

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from tabulate import tabulate

from tabula.exceptions import SchemaError
from tabula.row.attributes import Column, ForeignKey, Index, Table
from tabula.utils import to_snake_case


LOG = logging.getLogger(__name__)

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class MetadataFragment:
    """
    A declarable bundle of table, column, index and foreign key metadata.

    Attributes:
        table: The table declaration of this fragment, if any.
        columns: The column declarations, in order.
        indexes: The index declarations, in order.
        foreign_keys: The foreign key declarations, in order.
        fragments: Fragments composed into this one. They are merged before
            the fragment's own declarations.
    """

    table: Optional[Table] = None
    columns: Sequence[Column] = ()
    indexes: Sequence[Index] = ()
    foreign_keys: Sequence[ForeignKey] = ()
    fragments: Sequence["MetadataFragment"] = ()

    def __post_init__(self):
        for name in ("columns", "indexes", "foreign_keys", "fragments"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def flatten(self) -> "MetadataFragment":
        """
        Merge the composed fragments of this fragment with its own declarations.

        Returns:
            A fragment without nested fragments.
        """
        merged = MetadataFragment()
        for composed in self.fragments:
            merged = merge_fragments(merged, composed.flatten())
        return merge_fragments(merged, self.without_fragments())

    def without_fragments(self) -> "MetadataFragment":
        """
        Get this fragment's own declarations only.

        Returns:
            A copy of this fragment with no composed fragments.
        """
        return MetadataFragment(self.table, self.columns, self.indexes, self.foreign_keys)


def merge_fragments(earlier: MetadataFragment, later: MetadataFragment) -> MetadataFragment:
    """
    Merge two flat fragments, `later` being the more specific declaration.

    - Table: `later`'s table when `earlier` has none, otherwise
      [`Table.merge`][row.attributes.Table.merge] (later name/auto column win,
      primary keys concatenated).
    - Columns, indexes and foreign keys: concatenated, earlier first. Nothing
      is de-duplicated.

    Composed fragments of either argument are ignored; flatten them first.

    Args:
        earlier: The less specific metadata.
        later: The more specific metadata.

    Returns:
        The merged fragment.
    """
    table = later.table if earlier.table is None else earlier.table.merge(later.table)
    return MetadataFragment(
        table=table,
        columns=tuple(earlier.columns) + tuple(later.columns),
        indexes=tuple(earlier.indexes) + tuple(later.indexes),
        foreign_keys=tuple(earlier.foreign_keys) + tuple(later.foreign_keys),
    )


@dataclass(frozen=True)
class FieldAccessor:
    """
    Getter/setter pair reading and writing the entity attribute behind a column.

    Attributes:
        attribute: The name of the entity attribute.
        getter: Callable returning the attribute value of an entity (None when unset).
        setter: Callable assigning a value to the attribute of an entity.
    """

    attribute: str
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]

    @classmethod
    def for_attribute(cls, attribute: str) -> "FieldAccessor":
        """
        Build the accessor pair for a plain instance attribute.

        Args:
            attribute: The attribute name.

        Returns:
            A `FieldAccessor` for `attribute`.
        """
        return cls(
            attribute=attribute,
            getter=lambda entity: getattr(entity, attribute, None),
            setter=lambda entity, value: setattr(entity, attribute, value),
        )

    def get(self, entity: Any) -> Any:
        """Read the attribute value from `entity`."""
        return self.getter(entity)

    def set(self, entity: Any, value: Any):
        """Write `value` into the attribute of `entity`."""
        self.setter(entity, value)


@dataclass(frozen=True)
class ResolvedMetadata:
    """
    The final, merged metadata of one entity type.

    Attributes:
        entity: The entity type this metadata belongs to.
        table: The merged table, with a concrete name.
        columns: Every resolved column, in encounter order.
        indexes: Every resolved index, in encounter order.
        foreign_keys: Every resolved foreign key, in encounter order.
        accessors: Field accessors keyed by column name.

    Methods:
        get_column: Look up a column definition by name.
        is_primary_key: Check whether a column is part of the primary key.
        describe: Render the resolved columns as a text table.
    """

    entity: type
    table: Table
    columns: Tuple[Column, ...]
    indexes: Tuple[Index, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    accessors: Mapping[str, FieldAccessor] = field(default_factory=dict)

    @property
    def table_name(self) -> str:
        """The storage table name."""
        return self.table.name

    @property
    def primary_keys(self) -> Tuple[str, ...]:
        """The primary key column names, in order."""
        return self.table.primary_keys

    @property
    def column_definitions(self) -> Dict[str, Column]:
        """
        Column definitions keyed by name. When two columns share a name, the
        last declared one is kept.
        """
        return {column.name: column for column in self.columns}

    def get_column(self, name: str) -> Optional[Column]:
        """
        Look up a column definition by name.

        Args:
            name: The column name.

        Returns:
            The last declared column with that name, or None.
        """
        return self.column_definitions.get(name)

    def is_primary_key(self, name: str) -> bool:
        """
        Check whether a column is part of the primary key.

        Args:
            name: The column name.

        Returns:
            True if `name` is one of the primary key columns.
        """
        return name in self.table.primary_keys

    def describe(self) -> str:
        """
        Render the resolved columns as a text table.

        Returns:
            A formatted table listing every column of the entity.
        """
        rows = []
        for column in self.columns:
            flags = []
            if self.is_primary_key(column.name):
                flags.append("PK")
            if column.name == self.table.auto_column:
                flags.append("AUTO")
            rows.append(
                [
                    column.name,
                    column.storage_type,
                    column.domain_type,
                    "yes" if column.nullable else "no",
                    column.default,
                    " ".join(flags),
                ]
            )
        headers = ["Column", "Storage Type", "Domain Type", "Nullable", "Default", "Key"]
        return f"Table: {self.table.name}\n" + tabulate(rows, headers=headers)


class MetadataResolver:
    """
    Registry of declared metadata and cache of resolved metadata per entity type.

    The first resolution of a type is computed under a lock; later calls read
    the cache without locking. Once resolved, a type's metadata never changes.

    Attributes:
        _declarations (Dict[type, MetadataFragment]): Metadata declared directly on each type.
        _resolved (Dict[type, ResolvedMetadata]): Cache of resolved metadata.
        _lock (threading.RLock): Guards first resolution of a type.

    Methods:
        declare: Register the metadata declared on a type.
        declaration: Get the metadata declared directly on a type.
        collect: Merge the unresolved metadata of a type with its fragments and ancestor.
        resolve: Get the cached (or newly built) resolved metadata of a type.
    """

    def __init__(self):
        self._declarations: Dict[type, MetadataFragment] = {}
        self._resolved: Dict[type, ResolvedMetadata] = {}
        self._lock = threading.RLock()

    def declare(self, entity_type: type, fragment: MetadataFragment):
        """
        Register the metadata declared directly on an entity type.

        Args:
            entity_type: The entity type.
            fragment: Its declared metadata, composed fragments included.
        """
        with self._lock:
            if entity_type in self._resolved:
                LOG.warning(
                    f"Metadata for '{entity_type.__name__}' was already resolved. "
                    "The new declaration will not change it."
                )
            self._declarations[entity_type] = fragment
        LOG.debug(f"Declared metadata for '{entity_type.__name__}'.")

    def declaration(self, entity_type: type) -> Optional[MetadataFragment]:
        """
        Get the metadata declared directly on an entity type.

        Args:
            entity_type: The entity type.

        Returns:
            The declared fragment, or None if the type declares nothing.
        """
        return self._declarations.get(entity_type)

    def _is_mapped(self, klass: type) -> bool:
        return any(ancestor in self._declarations for ancestor in klass.__mro__)

    def _mapped_ancestor(self, entity_type: type) -> Optional[type]:
        """
        Find the direct ancestor of a type that carries metadata.

        Mixins without declared metadata are skipped.

        Args:
            entity_type: The entity type.

        Returns:
            The first base class that is (or derives from) a declared type, or None.
        """
        for base in entity_type.__bases__:
            if self._is_mapped(base):
                return base
        return None

    def collect(self, entity_type: type) -> MetadataFragment:
        """
        Merge the metadata of a type's fragments, ancestor and own declaration.

        The table name is left unresolved (it may be None).

        Args:
            entity_type: The entity type.

        Returns:
            A flat fragment holding the merged metadata.
        """
        declared = self._declarations.get(entity_type)
        merged = MetadataFragment()

        if declared is not None:
            for composed in declared.fragments:
                merged = merge_fragments(merged, composed.flatten())

        ancestor = self._mapped_ancestor(entity_type)
        if ancestor is not None:
            merged = merge_fragments(merged, self.collect(ancestor))

        if declared is not None:
            merged = merge_fragments(merged, declared.without_fragments())

        return merged

    def resolve(self, entity_type: type) -> ResolvedMetadata:
        """
        Get the resolved metadata of an entity type, resolving it on first use.

        Args:
            entity_type: The entity type.

        Returns:
            The resolved metadata of `entity_type`.

        Raises:
            (exceptions.SchemaError): If no table is declared anywhere for `entity_type`.
        """
        resolved = self._resolved.get(entity_type)
        if resolved is not None:
            return resolved

        with self._lock:
            resolved = self._resolved.get(entity_type)
            if resolved is None:
                resolved = self._build(entity_type)
                self._resolved[entity_type] = resolved
        return resolved

    def _build(self, entity_type: type) -> ResolvedMetadata:
        """
        Build the resolved metadata of an entity type.

        Args:
            entity_type: The entity type.

        Returns:
            The resolved metadata of `entity_type`.

        Raises:
            (exceptions.SchemaError): If no table is declared anywhere for `entity_type`.
        """
        LOG.debug(f"Resolving metadata for '{entity_type.__name__}'...")
        collected = self.collect(entity_type)
        if collected.table is None:
            raise SchemaError(
                f"Cannot determine a table for '{entity_type.__name__}': "
                "no table is declared on it, its fragments or its ancestors."
            )

        table = collected.table
        if table.name is None:
            table = Table(to_snake_case(entity_type.__name__), table.primary_keys, table.auto_column)

        accessors = {column.name: FieldAccessor.for_attribute(column.attribute) for column in collected.columns}
        resolved = ResolvedMetadata(
            entity=entity_type,
            table=table,
            columns=tuple(collected.columns),
            indexes=tuple(collected.indexes),
            foreign_keys=tuple(collected.foreign_keys),
            accessors=MappingProxyType(accessors),
        )
        LOG.debug(
            f"Resolved '{entity_type.__name__}' to table '{table.name}' with {len(resolved.columns)} columns "
            f"and primary keys {list(table.primary_keys)}."
        )
        return resolved


RESOLVER = MetadataResolver()


def entity(
    table: Optional[Table] = None,
    columns: Iterable[Column] = (),
    indexes: Iterable[Index] = (),
    foreign_keys: Iterable[ForeignKey] = (),
    fragments: Iterable[MetadataFragment] = (),
    resolver: MetadataResolver = None,
) -> Callable[[C], C]:
    """
    Class decorator declaring the metadata of an entity type.

    Args:
        table: The table declaration of the type.
        columns: The columns declared on the type.
        indexes: The indexes declared on the type.
        foreign_keys: The foreign keys declared on the type.
        fragments: Reusable fragments composed into the type, merged before
            its ancestor and its own declarations.
        resolver: The resolver to register into. Defaults to the process-wide resolver.

    Returns:
        The decorator registering the metadata and returning the class unchanged.
    """
    declared = MetadataFragment(
        table=table,
        columns=tuple(columns),
        indexes=tuple(indexes),
        foreign_keys=tuple(foreign_keys),
        fragments=tuple(fragments),
    )

    def decorator(cls: C) -> C:
        (resolver or RESOLVER).declare(cls, declared)
        return cls

    return decorator


def resolve_metadata(entity_type: Type[Any]) -> ResolvedMetadata:
    """
    Resolve the metadata of an entity type with the process-wide resolver.

    Args:
        entity_type: The entity type.

    Returns:
        The resolved metadata of `entity_type`.
    """
    return RESOLVER.resolve(entity_type)
