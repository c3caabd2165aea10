"""
Flatten and rebuild nested translation documents.

Translation files are nested JSON objects; the translation store works with
flat dot-joined key paths. Only string leaves are translation content: every
other JSON value is dropped when flattening.
"""

from typing import Any, Dict

from yflow.core.types import FlatKeyMap, JsonValue, KEY_SEPARATOR
from yflow.logger import get_logger

logger = get_logger(__name__)


class KeyPathConflictError(ValueError):
    """Raised by strict unflattening when one key path is a prefix of another."""

    def __init__(self, message: str, key_path: str = None):
        super().__init__(message)
        self.key_path = key_path


def flatten_json(data: JsonValue, parent_key: str = '', separator: str = KEY_SEPARATOR) -> FlatKeyMap:
    """
    Flatten a nested JSON structure into a flat dictionary of string values.

    Args:
        data: The nested value to flatten (normally a dict)
        parent_key: The key path of `data` (empty at the root)
        separator: The separator to use between keys

    Returns:
        A flat dictionary mapping key paths to string values. Numbers,
        booleans, arrays, null and empty objects carry no translation content
        and are left out.

    Example:
        Input: {"title": "Welcome", "port": 3000, "user": {"name": "Name"}}
        Output: {"title": "Welcome", "user.name": "Name"}
    """
    result: FlatKeyMap = {}
    _flatten_into(data, parent_key, separator, result)
    return result


def _flatten_into(value: JsonValue, key_path: str, separator: str, result: FlatKeyMap) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            new_key = f"{key_path}{separator}{key}" if key_path else str(key)
            _flatten_into(child, new_key, separator, result)
    elif isinstance(value, str):
        # A bare string at the root has no key path to live under
        if key_path:
            result[key_path] = value
    elif isinstance(value, bool):
        # Check bool before int, as bool is a subclass of int
        logger.debug(f"Dropping boolean at '{key_path}'")
    elif isinstance(value, (int, float)):
        logger.debug(f"Dropping number at '{key_path}'")
    elif isinstance(value, list):
        logger.debug(f"Dropping array at '{key_path}'")
    elif value is None:
        logger.debug(f"Dropping null at '{key_path}'")
    else:
        logger.debug(f"Unknown type at '{key_path}': {type(value)}")


def unflatten_json(flat: FlatKeyMap, separator: str = KEY_SEPARATOR, strict: bool = False) -> Dict[str, Any]:
    """
    Rebuild nested JSON from a flat dictionary.

    Keys are processed in input order. When one key path is a prefix of
    another (e.g. both "a" and "a.b"), the later key wins: a string standing
    where a nested object is needed is replaced by an object, and a string
    written to a path holding an object replaces that object.

    Args:
        flat: Flat dictionary of key paths to values
        separator: The separator used in key paths
        strict: Raise KeyPathConflictError instead of overwriting

    Returns:
        Nested dictionary

    Example:
        >>> unflatten_json({"home.title": "Hello"})
        {"home": {"title": "Hello"}}
    """
    result: Dict[str, Any] = {}

    for path, value in flat.items():
        set_path(result, path.split(separator), value, strict=strict)

    return result


def set_path(tree: Dict[str, Any], keys, value: Any, strict: bool = False) -> None:
    """
    Set `value` at the nested location named by `keys`, creating objects on the way.

    Any non-object value standing on the path is replaced by an object
    (or KeyPathConflictError is raised when `strict`).
    """
    node = tree
    for i, key in enumerate(keys[:-1]):
        if key not in node:
            node[key] = {}
        elif not isinstance(node[key], dict):
            if strict:
                conflict = KEY_SEPARATOR.join(keys[:i + 1])
                raise KeyPathConflictError(
                    f"Key path '{KEY_SEPARATOR.join(keys)}' needs '{conflict}' to be an object, "
                    f"but it already holds a value",
                    key_path=conflict,
                )
            logger.debug(f"Replacing value at '{KEY_SEPARATOR.join(keys[:i + 1])}' with an object")
            node[key] = {}
        node = node[key]

    last = keys[-1]
    if strict and isinstance(node.get(last), dict):
        path = KEY_SEPARATOR.join(keys)
        raise KeyPathConflictError(
            f"Key path '{path}' already holds nested keys",
            key_path=path,
        )
    node[last] = value
