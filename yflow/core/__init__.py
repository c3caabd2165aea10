"""
Core module - translation tree transforms

This module provides:
- flatten: nested JSON <-> flat dot-path maps
- merge: structure-preserving merge of flat translations into a document
- types: shared type aliases
"""

from yflow.core.types import (
    JsonValue,
    TranslationTree,
    FlatKeyMap,
    TranslationSet,
    KEY_SEPARATOR,
    count_keys,
)

from yflow.core.flatten import (
    KeyPathConflictError,
    flatten_json,
    unflatten_json,
)

from yflow.core.merge import merge_structured
