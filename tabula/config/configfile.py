##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module locates, loads and defaults the Tabula configuration file.

It houses the `CONFIG` object used throughout Tabula's codebase. The file is
looked up as `tabula.yaml` in the current working directory, then in
`~/.tabula/`. When no file exists, the built-in defaults are used (in-memory
storage, INFO logging).
"""
import logging
import os
from typing import Any, Dict, Optional

from tabula.config import Config
from tabula.config.config_filepaths import CONFIG_FILENAME, DEFAULT_SQLITE_PATH, TABULA_HOME
from tabula.log_formatter import setup_logging
from tabula.utils import dict_deep_merge, load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

CONFIG: Optional[Config] = None


def get_default_config() -> Dict:
    """
    Get the built-in configuration.

    Returns:
        A dictionary holding the default `logging`, `storage` and `cache` sections.
    """
    return {
        "logging": {"level": "INFO", "colors": True},
        "storage": {"type": "memory", "path": DEFAULT_SQLITE_PATH},
        "cache": {"warn_on_discard": True},
    }


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a Tabula YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath: The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file, or None if the file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No config file at {filepath}")
        return None
    LOG.info(f"Reading config from file {filepath}")
    return load_yaml(filepath) or {}


def find_config_file(path: str = None) -> Optional[str]:
    """
    Locate the Tabula configuration file (`tabula.yaml`).

    Without a `path`, the current working directory is checked first, then the
    `TABULA_HOME` directory. With a `path`, only that directory is checked.

    Args:
        path: A specific directory to look for `tabula.yaml`.

    Returns:
        The full path to the configuration file if found, otherwise None.
    """
    directories = [path] if path is not None else [os.getcwd(), TABULA_HOME]
    for directory in directories:
        candidate = os.path.join(directory, CONFIG_FILENAME)
        if os.path.isfile(candidate):
            return candidate
    return None


def _keep_loaded_value(dict_a_val: Any, **kwargs) -> Any:  # pylint: disable=unused-argument
    return dict_a_val


def load_defaults(config: Dict):
    """
    Fill in every setting missing from a loaded configuration with its default.

    Args:
        config: The loaded configuration, updated in place.
    """
    dict_deep_merge(config, get_default_config(), conflict_handler=_keep_loaded_value)


def get_config(path: Optional[str] = None) -> Dict:
    """
    Load the Tabula configuration file and apply defaults.

    Args:
        path: The directory to search for the configuration file. If None, the
            default search locations are used.

    Returns:
        A dictionary containing all the configuration data.
    """
    filepath = find_config_file(path)
    config = load_config(filepath) if filepath is not None else None
    if config is None:
        LOG.debug("No Tabula config file found. Using the default configuration.")
        return get_default_config()
    load_defaults(config)
    return config


def initialize_config(path: Optional[str] = None) -> Config:
    """
    Initializes (or re-initializes) the module-level Tabula configuration.

    Args:
        path: Path to look for the configuration file.

    Returns:
        The initialized configuration object.
    """
    global CONFIG  # pylint: disable=global-statement
    CONFIG = Config(get_config(path))
    return CONFIG


def get_active_config() -> Config:
    """
    Get the module-level configuration, loading it on first use.

    Returns:
        The active configuration object.
    """
    if CONFIG is None:
        return initialize_config()
    return CONFIG


def configure_logging(config: Optional[Config] = None, logger_name: str = "tabula"):
    """
    Set up logging for Tabula from the `logging` section of a configuration.

    Args:
        config: The configuration to read. Defaults to the active configuration.
        logger_name: The name of the logger to configure.
    """
    config = config or get_active_config()
    settings = config.logging
    setup_logging(
        logger=logging.getLogger(logger_name),
        log_level=getattr(settings, "level", "INFO"),
        colors=getattr(settings, "colors", True),
    )
