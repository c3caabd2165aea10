"""
Batching and retry primitives shared by the transfer pipelines.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Generator, List, Optional

from yflow.api.client import BatchPushResult
from yflow.api.exceptions import RateLimitError
from yflow.config import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE, DEFAULT_MAX_RETRIES
from yflow.core.types import FlatKeyMap
from yflow.logger import get_logger
from yflow.transfer.progress import SyncProgress

logger = get_logger(__name__)


class TransferCancelled(Exception):
    """Raised inside a pipeline when cancellation was requested."""
    pass


@dataclass(frozen=True)
class RetryPolicy:
    """Batch size and rate-limit retry settings for one run."""
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY  # seconds; also the backoff base
    max_retries: int = DEFAULT_MAX_RETRIES  # attempts per batch

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.batch_delay < 0:
            raise ValueError("batch_delay must not be negative")
        if self.max_retries <= 0:
            raise ValueError("max_retries must be positive")

    def backoff(self, retry_count: int) -> float:
        """Wait before retry number `retry_count` (1-indexed)."""
        return self.batch_delay * (retry_count * 2)


def chunk_translations(translations: FlatKeyMap, batch_size: int) -> List[Dict[str, str]]:
    """
    Split one language's translations into batches.

    Keys keep their order; every batch but the last holds `batch_size` keys.

    Example:
        120 keys with batch_size 50 -> batches of 50, 50 and 20 keys
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    entries = list(translations.items())
    return [dict(entries[i:i + batch_size]) for i in range(0, len(entries), batch_size)]


def push_with_retry(
    client,
    language: str,
    batch: Dict[str, str],
    policy: RetryPolicy,
    sleep: Callable[[float], None],
    is_cancelled: Optional[Callable[[], bool]] = None,
    batch_num: int = 1,
    total_batches: int = 1,
) -> Generator[SyncProgress, None, BatchPushResult]:
    """
    Push one batch, retrying with exponential backoff while rate limited.

    This is a generator: it yields a "retrying" SyncProgress before every
    backoff wait and returns the store's BatchPushResult, so callers use
    `result = yield from push_with_retry(...)`.

    The batch is attempted at most `policy.max_retries` times; retry n waits
    `batch_delay * n * 2`. Retries are strictly sequential.

    Raises:
        RateLimitError: When still rate limited after the last attempt
        APIError: On any other store failure (not retried)
        TransferCancelled: When cancellation is requested during a backoff wait
    """
    retry_count = 0

    while True:
        try:
            return client.push_batch({language: batch})
        except RateLimitError as e:
            if retry_count >= policy.max_retries - 1:
                logger.warning(
                    f"{language}[{batch_num}]: still rate limited after {retry_count + 1} attempts, giving up"
                )
                raise

            retry_count += 1
            wait_time = policy.backoff(retry_count)
            logger.info(
                f"  Rate limited, waiting {wait_time * 1000:.0f}ms before retry "
                f"({retry_count}/{policy.max_retries}, server asked for {e.retry_after:g}s)"
            )
            yield SyncProgress(
                phase="retrying",
                language=language,
                current_batch=batch_num,
                total_batches=total_batches,
                batch_keys_count=len(batch),
                retry_count=retry_count,
                wait_seconds=wait_time,
                message=str(e),
            )
            sleep(wait_time)

            if is_cancelled is not None and is_cancelled():
                raise TransferCancelled(f"Cancelled while retrying {language}[{batch_num}]")
