##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Conversions between `Row` entities and dictionaries, JSON strings and JSON files.
"""

import json
import logging
import os
from typing import Any, Dict, Generic, Mapping, Type, TypeVar

from filelock import FileLock

from tabula.row.row import Row, instantiate_from_row


LOG = logging.getLogger(__name__)
R = TypeVar("R", bound=Row)


class RowConverter(Generic[R]):
    """
    Wraps one entity and converts it to and from its storage row representation.

    Attributes:
        row (R): The wrapped entity.

    Methods:
        from_dict: Build a converter around an entity hydrated from a dict.
        from_json: Build a converter around an entity hydrated from a JSON string.
        load_from_json_file: Build a converter around an entity hydrated from a JSON file.
        get: Get the wrapped entity.
        to_dict: Convert the entity to its storage row.
        to_json: Convert the entity to a JSON string.
        dump_to_json_file: Write the entity's storage row to a JSON file.
    """

    def __init__(self, row: R):
        """
        Args:
            row: The entity to wrap.
        """
        self.row: R = row

    @classmethod
    def from_dict(cls, entity_type: Type[R], data: Mapping[str, Any], *args, **kwargs) -> "RowConverter[R]":
        """
        Build a converter around an entity hydrated from a storage row dict.

        Args:
            entity_type: The `Row` subclass to instantiate.
            data: A mapping of column name to storage value.
            args: Positional constructor arguments for the entity.
            kwargs: Keyword constructor arguments for the entity.

        Returns:
            A converter wrapping the new entity.
        """
        return cls(instantiate_from_row(entity_type, data, False, *args, **kwargs))

    @classmethod
    def from_json(cls, entity_type: Type[R], json_str: str, *args, **kwargs) -> "RowConverter[R]":
        """
        Build a converter around an entity hydrated from a JSON object string.

        Args:
            entity_type: The `Row` subclass to instantiate.
            json_str: A JSON object of column name to storage value.
            args: Positional constructor arguments for the entity.
            kwargs: Keyword constructor arguments for the entity.

        Returns:
            A converter wrapping the new entity.
        """
        return cls.from_dict(entity_type, json.loads(json_str), *args, **kwargs)

    @classmethod
    def load_from_json_file(cls, entity_type: Type[R], filepath: str, *args, **kwargs) -> "RowConverter[R]":
        """
        Build a converter around an entity hydrated from a JSON file.

        Args:
            entity_type: The `Row` subclass to instantiate.
            filepath: The path to the JSON file.
            args: Positional constructor arguments for the entity.
            kwargs: Keyword constructor arguments for the entity.

        Returns:
            A converter wrapping the new entity.

        Raises:
            ValueError: If `filepath` is not provided or does not exist.
        """
        if not filepath or not os.path.exists(filepath):
            raise ValueError("A valid file path must be provided.")

        lock_file = f"{filepath}.lock"
        with FileLock(lock_file):  # pylint: disable=abstract-class-instantiated
            with open(filepath, "r") as json_file:
                data = json.load(json_file)

        return cls.from_dict(entity_type, data, *args, **kwargs)

    def get(self) -> R:
        """
        Get the wrapped entity.

        Returns:
            The entity.
        """
        return self.row

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the entity to its storage row.

        Returns:
            A dict of column name to storage value.
        """
        return self.row.to_storage_row()

    def to_json(self) -> str:
        """
        Convert the entity to a JSON object string.

        Returns:
            The JSON-encoded storage row.
        """
        return json.dumps(self.to_dict())

    def dump_to_json_file(self, filepath: str):
        """
        Write the entity's storage row to a JSON file.

        The file is written to a temporary path and moved into place while a
        lock file is held.

        Args:
            filepath: The path to the JSON file.

        Raises:
            ValueError: If `filepath` is not provided.
        """
        if not filepath:
            raise ValueError("A valid file path must be provided.")

        lock_file = f"{filepath}.lock"
        with FileLock(lock_file):  # pylint: disable=abstract-class-instantiated
            temp_filepath = f"{filepath}.tmp"
            with open(temp_filepath, "w") as json_file:
                json.dump(self.to_dict(), json_file, indent=4)
            os.replace(temp_filepath, filepath)

        LOG.debug(f"'{self.row.__class__.__name__}' row successfully dumped to {filepath}.")
