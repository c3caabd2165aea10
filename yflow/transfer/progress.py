"""
Transfer Progress Data Class

Contains the SyncProgress dataclass emitted by the import and sync pipelines.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SyncProgress:
    """Progress information for an ongoing import or sync."""
    phase: str                       # see PHASES
    language: str = ""
    total_languages: int = 0
    completed_languages: int = 0
    # Batch progress fields (import)
    current_batch: int = 0           # Current batch number (1-indexed)
    total_batches: int = 0           # Total batches for current language
    batch_keys_count: int = 0        # Number of keys in current batch
    retry_count: int = 0             # Retries made for the current batch
    wait_seconds: float = 0.0        # Backoff before the next attempt
    # Key counters for current language
    processed_keys: int = 0
    total_keys: int = 0
    # File progress fields (sync)
    file_path: Optional[str] = None
    message: str = ""


PHASES = (
    "auth",
    "scanning",
    "fetching",
    "language_start",
    "batch_done",
    "retrying",
    "batch_failed",
    "language_done",
    "file_written",
    "file_failed",
    "cancelled",
    "completed",
)
