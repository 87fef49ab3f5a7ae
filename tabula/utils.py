##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Module for project-wide utility functions.
"""
import logging
import re
from copy import deepcopy
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterable, List

import yaml


LOG = logging.getLogger(__name__)

PRIMARY_SEPARATOR = "-"
ESCAPE_CHAR = "\\"


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Turn a nested dict into nested SimpleNamespace objects.

    The input is deep-copied first, so it is never modified. Values that are
    not dicts (lists included) are kept as they are.

    Args:
        dic: The dict to convert.

    Returns:
        A SimpleNamespace whose attributes are the keys of `dic`.

    Raises:
        TypeError: If `dic` is not a dict.
    """
    if not isinstance(dic, dict):
        raise TypeError(f"{dic} is not a dict")

    def to_namespace(value: Any) -> Any:
        if isinstance(value, dict):
            return SimpleNamespace(**{key: to_namespace(val) for key, val in value.items()})
        return value

    return to_namespace(deepcopy(dic))


def dict_deep_merge(dict_a: Dict, dict_b: Dict, path: List[str] = None, conflict_handler: Callable = None):
    """
    Merge `dict_b` into `dict_a` in place, descending into nested dicts.

    Keys missing from `dict_a` are copied over. When both dicts hold a
    different leaf value for a key, `conflict_handler` picks the value to
    keep; without a handler, `dict_a` keeps its value and a warning names the
    conflicting key path.

    Args:
        dict_a: The dict updated in place.
        dict_b: The dict read from.
        path: Key path of `dict_a` within the outermost dict, for log messages.
        conflict_handler: Called with `dict_a_val`, `dict_b_val`, `key` and
            `path` keyword arguments; returns the value stored in `dict_a`.
    """
    bad_args = [
        f"{name} '{value}' is not a dict"
        for name, value in (("dict_a", dict_a), ("dict_b", dict_b))
        if not isinstance(value, dict)
    ]
    if bad_args:
        LOG.warning(f"Problem with dict_deep_merge: {', '.join(bad_args)}. Ignoring this merge call.")
        return

    path = path or []
    for key, value_b in dict_b.items():
        key_path = path + [str(key)]
        if key not in dict_a:
            dict_a[key] = value_b
            continue

        value_a = dict_a[key]
        if isinstance(value_a, dict) and isinstance(value_b, dict):
            dict_deep_merge(value_a, value_b, path=key_path, conflict_handler=conflict_handler)
        elif value_a == value_b:
            continue
        elif conflict_handler is not None:
            dict_a[key] = conflict_handler(dict_a_val=value_a, dict_b_val=value_b, key=key, path=key_path)
        else:
            LOG.warning(f"Conflict at {'.'.join(key_path)}. Ignoring the update to key '{key}'.")


def to_snake_case(name: str) -> str:
    """
    Convert a CamelCase class name into a snake_case identifier.

    Args:
        name: The name to convert (e.g. "PlayerScore").

    Returns:
        The snake_case version of `name` (e.g. "player_score").
    """
    name = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def join_primary_string(values: Iterable[Any]) -> str:
    """
    Join primary key values into one flat string.

    A single component is returned as its plain string. With several
    components, any backslash or separator character inside a component is
    escaped with a backslash, so two different key tuples never produce the
    same string, e.g. `[7]` gives `"7"`, `["a-b"]` gives `"a-b"` and
    `["a-b", "c"]` gives `"a\\-b-c"`.

    Args:
        values: The primary key values, in primary key order.

    Returns:
        The joined primary string.
    """
    texts = ["" if value is None else str(value) for value in values]
    if len(texts) == 1:
        return texts[0]
    return PRIMARY_SEPARATOR.join(
        text.replace(ESCAPE_CHAR, ESCAPE_CHAR * 2).replace(PRIMARY_SEPARATOR, ESCAPE_CHAR + PRIMARY_SEPARATOR)
        for text in texts
    )


def split_primary_string(primary_string: str) -> List[str]:
    """
    Split a string built by `join_primary_string` from several components
    back into those components. A single-component key is not escaped, so
    it must not be split.

    Args:
        primary_string: The joined primary string.

    Returns:
        The list of (string) components.
    """
    parts = []
    current = []
    chars = iter(primary_string)
    for char in chars:
        if char == ESCAPE_CHAR:
            current.append(next(chars, ""))
        elif char == PRIMARY_SEPARATOR:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts
