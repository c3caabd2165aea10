"""
Shared type aliases for translation data.

JsonValue is the closed set of values `json.load` produces. Translation
content is only ever carried by `str` leaves of nested dicts.
"""

from typing import Any, Dict, List, Union

JsonValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]

# Nested translation document, e.g. {"user": {"name": "Name"}}
TranslationTree = Dict[str, Any]

# Dot-joined key path -> string value, e.g. {"user.name": "Name"}
FlatKeyMap = Dict[str, str]

# Language code -> flat key map
TranslationSet = Dict[str, FlatKeyMap]

KEY_SEPARATOR = "."


def count_keys(translations: TranslationSet) -> int:
    """Total number of keys across all languages."""
    return sum(len(keys) for keys in translations.values())
