import pytest

from yflow.api.client import BatchPushResult
from yflow.api.exceptions import APIError, RateLimitError
from yflow.transfer.batching import RetryPolicy, TransferCancelled, chunk_translations, push_with_retry


class ScriptedClient:
    """Answers push_batch from a list of outcomes (exceptions are raised)."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def push_batch(self, translations):
        self.calls.append(translations)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def drain(generator):
    """Collect the yielded events and the return value of a generator."""
    events = []
    while True:
        try:
            events.append(next(generator))
        except StopIteration as stop:
            return events, stop.value


def rate_limited():
    return RateLimitError("Rate limited (429)", retry_after=1)


def test_chunk_sizes():
    translations = {f"key{i}": f"value{i}" for i in range(120)}

    chunks = chunk_translations(translations, 50)

    assert [len(chunk) for chunk in chunks] == [50, 50, 20]
    assert [key for chunk in chunks for key in chunk] == list(translations)


def test_chunk_empty_and_invalid():
    assert chunk_translations({}, 50) == []
    with pytest.raises(ValueError):
        chunk_translations({"a": "A"}, 0)


def test_retry_policy_validation():
    with pytest.raises(ValueError):
        RetryPolicy(batch_size=0)
    with pytest.raises(ValueError):
        RetryPolicy(batch_delay=-1)
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=0)


def test_backoff_doubles_with_each_retry():
    policy = RetryPolicy(batch_delay=0.2)

    assert policy.backoff(1) == pytest.approx(0.4)
    assert policy.backoff(2) == pytest.approx(0.8)


def test_success_after_rate_limits(sleeps):
    expected = BatchPushResult(added=["a"])
    client = ScriptedClient([rate_limited(), rate_limited(), expected])

    events, result = drain(push_with_retry(client, "en", {"a": "A"}, RetryPolicy(), sleeps.append))

    assert result == expected
    assert len(client.calls) == 3
    assert client.calls[0] == {"en": {"a": "A"}}
    assert sleeps == [pytest.approx(0.4), pytest.approx(0.8)]
    assert [event.phase for event in events] == ["retrying", "retrying"]
    assert [event.retry_count for event in events] == [1, 2]
    assert events[0].wait_seconds == pytest.approx(0.4)


def test_gives_up_after_max_attempts(sleeps):
    client = ScriptedClient([rate_limited(), rate_limited(), rate_limited(), BatchPushResult()])

    with pytest.raises(RateLimitError):
        drain(push_with_retry(client, "en", {"a": "A"}, RetryPolicy(), sleeps.append))

    assert len(client.calls) == 3
    assert sleeps == [pytest.approx(0.4), pytest.approx(0.8)]


def test_other_errors_are_not_retried(sleeps):
    client = ScriptedClient([APIError("API error (500)", status_code=500)])

    with pytest.raises(APIError):
        drain(push_with_retry(client, "en", {"a": "A"}, RetryPolicy(), sleeps.append))

    assert len(client.calls) == 1
    assert sleeps == []


def test_cancelled_during_backoff(sleeps):
    client = ScriptedClient([rate_limited(), BatchPushResult()])

    with pytest.raises(TransferCancelled):
        drain(push_with_retry(
            client, "en", {"a": "A"}, RetryPolicy(), sleeps.append, is_cancelled=lambda: True,
        ))

    assert len(client.calls) == 1
