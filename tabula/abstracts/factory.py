##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Registry base class for the pluggable parts of Tabula.

A `TabulaBaseFactory` maps names (and aliases of those names) to classes.
Subclasses fill the registry with their built-in classes, decide which
classes are acceptable, and name the entry point group that third-party
packages use to add their own classes.
"""

import logging
from abc import ABC, abstractmethod
from importlib.metadata import entry_points
from typing import Any, Dict, List


LOG = logging.getLogger(__name__)


class TabulaBaseFactory(ABC):
    """
    Name-to-class registry able to build instances of the classes it holds.

    Subclasses must implement:
        - `_register_builtins()`: register the classes shipped with Tabula
        - `_validate_component()`: reject classes that do not fit the registry
        - `_entry_point_group()`: the entry point group scanned for plugins

    Attributes:
        _registry (Dict[str, Any]): Canonical names mapped to their classes.
        _aliases (Dict[str, str]): Alternate names mapped to canonical names.

    Methods:
        register: Add a class under a name and optional aliases.
        canonical_name: Resolve an alias to the name it stands for.
        list_available: List the registered names, plugins included.
        get_class: Look up the class registered under a name or alias.
        create: Build an instance of the class registered under a name or alias.
    """

    def __init__(self):
        self._registry: Dict[str, Any] = {}
        self._aliases: Dict[str, str] = {}
        self._register_builtins()

    @abstractmethod
    def _register_builtins(self):
        """
        Register the classes shipped with Tabula.
        """
        raise NotImplementedError("Subclasses of `TabulaBaseFactory` must implement a `_register_builtins` method.")

    @abstractmethod
    def _validate_component(self, component_class: Any):
        """
        Check that a class may be registered.

        Args:
            component_class: The class about to be registered.

        Raises:
            TypeError: If `component_class` does not fit the registry.
        """
        raise NotImplementedError("Subclasses of `TabulaBaseFactory` must implement a `_validate_component` method.")

    @abstractmethod
    def _entry_point_group(self) -> str:
        """
        Name the entry point group scanned for plugins.

        Returns:
            The entry point group.
        """
        raise NotImplementedError("Subclasses of `TabulaBaseFactory` must implement an `_entry_point_group` method.")

    def _not_supported(self, msg: str):
        """
        Report a name that nothing is registered under.

        Subclasses override this to raise their own exception type.

        Args:
            msg: The error message.

        Raises:
            ValueError: Always.
        """
        raise ValueError(msg)

    def _discover_plugins(self):
        """
        Register the classes advertised in the entry point group.

        Names already in the registry are left alone. A plugin that cannot be
        loaded is skipped with a warning.
        """
        for entry_point in entry_points(group=self._entry_point_group()):
            if entry_point.name in self._registry:
                continue
            try:
                self.register(entry_point.name, entry_point.load())
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOG.warning(f"Failed to load plugin '{entry_point.name}': {exc}")
            else:
                LOG.info(f"Registered plugin '{entry_point.name}' from '{self._entry_point_group()}'.")

    def register(self, name: str, component_class: Any, aliases: List[str] = None):
        """
        Add a class under a name and optional aliases.

        Registering a name again replaces the class it maps to.

        Args:
            name: The canonical name.
            component_class: The class to register.
            aliases: Alternate names resolving to `name`.

        Raises:
            TypeError: If `component_class` fails validation.
        """
        self._validate_component(component_class)
        self._registry[name] = component_class
        for alias in aliases or []:
            self._aliases[alias] = name
        LOG.debug(f"Registered '{name}' ({component_class.__name__}) with aliases {aliases or []}.")

    def canonical_name(self, name: str) -> str:
        """
        Resolve an alias to the name it stands for.

        Args:
            name: A canonical name or an alias.

        Returns:
            The canonical name. Unknown names are returned unchanged.
        """
        return self._aliases.get(name, name)

    def list_available(self) -> List[str]:
        """
        List the registered names, discovering plugins first.

        Returns:
            The canonical names, in registration order.
        """
        self._discover_plugins()
        return list(self._registry)

    def get_class(self, name: str) -> Any:
        """
        Look up the class registered under a name or alias.

        Plugins are only discovered when the name is not registered yet.

        Args:
            name: A canonical name or an alias.

        Returns:
            The registered class.
        """
        canonical = self.canonical_name(name)
        if canonical not in self._registry:
            self._discover_plugins()

        if canonical not in self._registry:
            self._not_supported(f"'{name}' is not supported. Available: {', '.join(self.list_available())}")
        return self._registry[canonical]

    def create(self, name: str, config: Dict = None) -> Any:
        """
        Build an instance of the class registered under a name or alias.

        Args:
            name: A canonical name or an alias.
            config: Keyword arguments passed to the constructor.

        Returns:
            The new instance.

        Raises:
            ValueError: If the constructor fails.
        """
        component_class = self.get_class(name)
        try:
            instance = component_class(**(config or {}))
        except Exception as exc:
            raise ValueError(f"Failed to create '{self.canonical_name(name)}': {exc}") from exc

        LOG.debug(f"Created {component_class.__name__} for '{name}'.")
        return instance
