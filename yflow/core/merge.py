"""
Structure-preserving merge of flat translations into an existing document.
"""

import copy
from typing import Any, Dict

from yflow.core.flatten import set_path
from yflow.core.types import FlatKeyMap, KEY_SEPARATOR


def merge_structured(original: Dict[str, Any], updates: FlatKeyMap, separator: str = KEY_SEPARATOR) -> Dict[str, Any]:
    """
    Overlay flat translations onto a nested document.

    The merge always takes the new value; deciding which keys to leave alone
    is the caller's job.

    - keys of `original` not in `updates` keep their value and position
    - keys in both get the value from `updates`
    - keys only in `updates` are added after the existing keys of their object
    - non-string values of `original` (numbers, booleans, arrays, null) are kept,
      unless an update needs to nest below one of them

    Args:
        original: Parsed JSON document (not modified)
        updates: Flat key path -> new string value

    Returns:
        The merged document
    """
    merged = copy.deepcopy(original) if isinstance(original, dict) else {}

    for key_path, value in updates.items():
        set_path(merged, key_path.split(separator), value)

    return merged
