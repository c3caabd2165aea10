"""
Language code mapping between local directories and the translation store.

Local language directories do not always use the store's codes, e.g. a
project keeps `zh_CN/` while the store calls the language `zh`. The mapping
is configured as local code -> remote code, e.g. {"zh_CN": "zh", "zh_TW": "tw"}.

Several local codes may map to the same remote code; their keys are merged
when pushing, and the reverse lookup picks the last of them in configuration
order.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from yflow.core.types import TranslationSet


class LanguageMapper:
    """Bidirectional, read-only language code mapping."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        local_to_remote: Dict[str, str] = dict(mapping or {})
        remote_to_local: Dict[str, str] = {}
        for local_code, remote_code in local_to_remote.items():
            remote_to_local[remote_code] = local_code

        self._local_to_remote = MappingProxyType(local_to_remote)
        self._remote_to_local = MappingProxyType(remote_to_local)

    @property
    def mapping(self) -> Mapping[str, str]:
        """Local code -> remote code table."""
        return self._local_to_remote

    def to_remote(self, local_code: str) -> str:
        """Convert a local language code to the store's code."""
        return self._local_to_remote.get(local_code, local_code)

    def to_local(self, remote_code: str) -> str:
        """Convert a store language code to the local code."""
        return self._remote_to_local.get(remote_code, remote_code)

    def apply_forward(self, translations: TranslationSet) -> TranslationSet:
        """Re-key translations by remote code, merging colliding languages."""
        return _rekey(translations, self.to_remote)

    def apply_reverse(self, translations: TranslationSet) -> TranslationSet:
        """Re-key translations by local code (used when syncing)."""
        return _rekey(translations, self.to_local)

    def needs_mapping(self) -> bool:
        return len(self._local_to_remote) > 0

    def describe(self) -> str:
        """Human-readable summary of the mapping."""
        if not self.needs_mapping():
            return "No language mapping"
        pairs = ", ".join(f"{local} -> {remote}" for local, remote in self._local_to_remote.items())
        return f"Language mapping: {pairs}"

    def __repr__(self):
        return f"LanguageMapper({dict(self._local_to_remote)!r})"


def _rekey(translations: TranslationSet, convert) -> TranslationSet:
    result: TranslationSet = {}
    for code, lang_data in translations.items():
        target = result.setdefault(convert(code), {})
        # Later sources win on key collisions
        target.update(lang_data)
    return result
