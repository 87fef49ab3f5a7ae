##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Used to store the library configuration.

The `config` package loads the `tabula.yaml` configuration file (or built-in
defaults) and exposes it as a `Config` object.

Modules:
    config_filepaths.py: Constants for the configuration file locations.
    configfile.py: Locating, loading and defaulting the configuration file.
    storage.py: Turning the `storage` section into executor settings.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, List, Optional

from tabula.utils import nested_dict_to_namespaces


class Config:  # pylint: disable=R0903
    """
    The Config class, storing every Tabula setting in one place.

    Attributes:
        logging (Optional[SimpleNamespace]): Logging settings (`level`, `colors`).
        storage (Optional[SimpleNamespace]): Storage settings (`type` plus executor options).
        cache (Optional[SimpleNamespace]): Write-back cache settings (`warn_on_discard`).

    Methods:
        __copy__: Creates a shallow copy of the Config instance.
        __str__: Returns a formatted string representation of the Config instance.
        load_app_into_namespaces: Converts the configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    sections: List[str] = ["logging", "storage", "cache"]

    def __init__(self, app_dict: Dict):
        """
        Args:
            app_dict: A dictionary of configuration data. The `logging`, `storage`
                and `cache` keys are each converted into a `SimpleNamespace`.
        """
        self.logging: Optional[SimpleNamespace] = None
        self.storage: Optional[SimpleNamespace] = None
        self.cache: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict)

    def __copy__(self) -> "Config":
        """
        Creates a shallow copy of the Config instance.

        Returns:
            A new Config instance with copied sections.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({section: copy(self.__dict__[section]) for section in self.sections})
        return result

    def __str__(self) -> str:
        formatted_str = "config:"
        for name in self.sections:
            attr = getattr(self, name)
            if attr is not None:
                joined_items = "\n".join(f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the configuration dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data.
        """
        for field in self.sections:
            try:
                setattr(self, field, nested_dict_to_namespaces(app_dict[field]))
            except KeyError:
                # The sections are optional
                pass
