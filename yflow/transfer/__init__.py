"""
Transfer module - moving translations between files and the store

This module provides:
- ImportPipeline: push local translations in batches
- SyncPipeline: pull store translations into local files
- SyncProgress: progress event dataclass
- Batching and retry primitives
"""

from yflow.transfer.progress import SyncProgress, PHASES
from yflow.transfer.results import ImportResult, SyncResult
from yflow.transfer.batching import (
    RetryPolicy,
    TransferCancelled,
    chunk_translations,
    push_with_retry,
)
from yflow.transfer.importer import ImportPipeline
from yflow.transfer.syncer import SyncPipeline
