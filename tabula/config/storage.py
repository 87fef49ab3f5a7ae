##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module turns the `storage` section of the configuration into the name and
constructor arguments of a storage executor.
"""
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from tabula.config import Config
from tabula.config.config_filepaths import DEFAULT_SQLITE_PATH
from tabula.exceptions import ConfigurationError


LOG = logging.getLogger(__name__)


def get_redis_url(storage: Any) -> str:
    """
    Build a Redis connection URL from the `storage` section.

    An explicit `url` wins. Otherwise the URL is built from `host`, `port`,
    `db`, `password` and `ssl`.

    Args:
        storage: The `storage` section of the configuration.

    Returns:
        The Redis connection URL.
    """
    url = getattr(storage, "url", None)
    if url:
        return url

    scheme = "rediss" if getattr(storage, "ssl", False) else "redis"
    host = getattr(storage, "host", "localhost")
    port = getattr(storage, "port", 6379)
    db_num = getattr(storage, "db", 0)
    password = getattr(storage, "password", None)
    credentials = f":{quote(str(password), safe='')}@" if password else ""
    return f"{scheme}://{credentials}{host}:{port}/{db_num}"


def get_executor_settings(config: Optional[Config] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Get the executor name and constructor arguments from the `storage` section.

    Args:
        config: The configuration to read. Defaults to the active configuration.

    Returns:
        A tuple of (executor name, constructor keyword arguments).

    Raises:
        (exceptions.ConfigurationError): If the `storage` section or its `type` is missing.
    """
    if config is None:
        from tabula.config.configfile import get_active_config  # pylint: disable=import-outside-toplevel

        config = get_active_config()

    storage = config.storage
    executor_type = getattr(storage, "type", None) if storage is not None else None
    if not executor_type:
        raise ConfigurationError("The configuration has no 'storage.type' setting.")

    executor_type = str(executor_type).lower()
    LOG.debug(f"Storage executor type from configuration: '{executor_type}'.")

    if executor_type in ("memory", "in-memory"):
        return executor_type, {}
    if executor_type in ("sqlite", "sqlite3"):
        return executor_type, {"db_path": getattr(storage, "path", None) or DEFAULT_SQLITE_PATH}
    if executor_type in ("redis", "rediss"):
        return executor_type, {"url": get_redis_url(storage)}

    options = getattr(storage, "options", None)
    return executor_type, dict(vars(options)) if options is not None else {}
