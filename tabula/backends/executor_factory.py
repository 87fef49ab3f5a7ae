##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Executor factory for selecting and instantiating storage executors.

This module defines the `TabulaExecutorFactory` class, which keeps the mapping
of executor names and aliases to their classes, builds executors by name or
from the `storage` section of the configuration, and raises a clear error if
an unsupported executor is requested.
"""

from typing import TYPE_CHECKING, Any

from tabula.abstracts import TabulaBaseFactory
from tabula.backends.memory.memory_executor import MemoryExecutor
from tabula.backends.redis.redis_executor import RedisExecutor
from tabula.backends.sqlite.sqlite_executor import SQLiteExecutor
from tabula.backends.storage_executor import StorageExecutor
from tabula.exceptions import ExecutorNotSupportedError


if TYPE_CHECKING:
    from tabula.config import Config


class TabulaExecutorFactory(TabulaBaseFactory):
    """
    Registry of the storage executors Tabula can build.

    Built-in executors are `memory`, `sqlite` and `redis`. Packages add their
    own through the `tabula.executors` entry point group.

    Attributes:
        _registry (Dict[str, Type[StorageExecutor]]): Executor names mapped to executor classes.
        _aliases (Dict[str, str]): Alternate names mapped to executor names.

    Methods:
        register: Add an executor class under a name and optional aliases.
        list_available: List the executor names, plugins included.
        create: Build an executor by name or alias.
        create_from_config: Build the executor described by the configuration.
    """

    def _register_builtins(self):
        self.register("memory", MemoryExecutor, aliases=["in-memory"])
        self.register("redis", RedisExecutor, aliases=["rediss"])
        self.register("sqlite", SQLiteExecutor, aliases=["sqlite3"])

    def _validate_component(self, component_class: Any):
        """
        Accept only `StorageExecutor` subclasses.

        Args:
            component_class: The class about to be registered.

        Raises:
            TypeError: If the class does not subclass `StorageExecutor`.
        """
        if not isinstance(component_class, type) or not issubclass(component_class, StorageExecutor):
            raise TypeError(f"{component_class} must inherit from StorageExecutor")

    def _entry_point_group(self) -> str:
        return "tabula.executors"

    def _not_supported(self, msg: str):
        """
        Report an executor name that nothing is registered under.

        Args:
            msg: The error message.

        Raises:
            (exceptions.ExecutorNotSupportedError): Always.
        """
        raise ExecutorNotSupportedError(msg)

    def create_from_config(self, config: "Config" = None) -> StorageExecutor:
        """
        Build the executor described by the `storage` section of a configuration.

        Args:
            config: A [`Config`][config.Config] object. Defaults to the loaded configuration.

        Returns:
            The configured executor.
        """
        from tabula.config.storage import get_executor_settings  # pylint: disable=import-outside-toplevel

        executor_type, executor_kwargs = get_executor_settings(config)
        return self.create(executor_type, executor_kwargs)


executor_factory = TabulaExecutorFactory()
