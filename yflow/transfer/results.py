"""
Result accumulators for import and sync runs.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ImportResult:
    """Container for import (push) results."""
    added: int = 0
    updated: int = 0  # keys the store already had
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    dry_run: bool = False
    cancelled: bool = False
    languages: Dict[str, int] = field(default_factory=dict)  # {language: keys pushed}
    preview: Dict[str, List[str]] = field(default_factory=dict)  # dry run only

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or bool(self.errors)

    def __str__(self):
        return (f"ImportResult(added={self.added}, "
                f"updated={self.updated}, "
                f"failed={self.failed}, "
                f"errors={len(self.errors)})")


@dataclass
class SyncResult:
    """Container for sync (pull) results."""
    downloaded: int = 0
    skipped: int = 0
    written: int = 0  # distinct files modified or created
    errors: List[str] = field(default_factory=list)
    dry_run: bool = False
    cancelled: bool = False
    written_files: List[str] = field(default_factory=list)
    new_keys: Dict[str, List[str]] = field(default_factory=dict)  # {language: keys absent locally}
    existing_keys: Dict[str, List[str]] = field(default_factory=dict)  # {language: keys present locally}

    @property
    def has_failures(self) -> bool:
        return bool(self.errors)

    def __str__(self):
        return (f"SyncResult(downloaded={self.downloaded}, "
                f"skipped={self.skipped}, "
                f"written={self.written}, "
                f"errors={len(self.errors)})")
