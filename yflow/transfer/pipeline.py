"""
Base class for the import and sync pipelines.

A pipeline is a one-shot generator of SyncProgress events. The result is
built while the events are drained and is available from `result` (and from
`run()`) once the generator is exhausted.
"""

import threading
from typing import Callable, Generic, Iterator, Optional, TypeVar

from yflow.api.exceptions import AuthenticationError
from yflow.logger import get_logger
from yflow.transfer.batching import RetryPolicy
from yflow.transfer.progress import SyncProgress

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")


class Pipeline(Generic[ResultT]):
    """Shared plumbing: auth check, cancellation, one-shot event stream."""

    name = "pipeline"

    def __init__(
        self,
        client,
        messages_dir,
        mapper,
        dry_run: bool = False,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.client = client
        self.messages_dir = messages_dir
        self.mapper = mapper
        self.dry_run = dry_run
        self.policy = policy or RetryPolicy()
        self.cancel_event = cancel_event or threading.Event()
        # Waiting on the cancel event lets a cancel cut a delay short
        self.sleep = sleep or self.cancel_event.wait
        self.result: Optional[ResultT] = None
        self._started = False

    def cancel(self) -> None:
        """Request cooperative cancellation; checked between batches and file writes."""
        self.cancel_event.set()

    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def events(self) -> Iterator[SyncProgress]:
        """
        Run the pipeline lazily, yielding progress events.

        Raises:
            RuntimeError: If the pipeline was already started
            AuthenticationError: If the store rejects the API key
        """
        if self._started:
            raise RuntimeError(f"{self.name} pipeline already started; create a new one to run again")
        self._started = True
        return self._run()

    def run(self, on_progress: Optional[Callable[[SyncProgress], None]] = None) -> ResultT:
        """Drain all events, passing each to `on_progress`, and return the result."""
        for event in self.events():
            if on_progress is not None:
                on_progress(event)
        return self.result

    def _check_auth(self) -> Iterator[SyncProgress]:
        yield SyncProgress(phase="auth", message="Checking API authentication")
        if not self.client.check_auth():
            raise AuthenticationError("API authentication failed, check that apiKey is correct", status_code=401)
        logger.info("Authentication successful")

    def _run(self) -> Iterator[SyncProgress]:
        raise NotImplementedError
