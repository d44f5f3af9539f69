"""Tests for the retry wrapper."""

import asyncio

import pytest

from retrycache.core.errors import InvalidPolicyError, RetryExhausted
from retrycache.execution.events import RecordingObserver, RetryAttempt
from retrycache.execution.retry import (
    RetryContext,
    RetryPolicy,
    RetryWrapper,
    retry,
    with_retry,
)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_default_configuration(self):
        """Test default configuration values."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.base_delay == 0.3

    def test_delay_doubles_per_attempt(self):
        """Test delay calculation is base_delay * 2**i."""
        policy = RetryPolicy(max_attempts=6, base_delay=0.3)
        assert policy.delay_for(0) == pytest.approx(0.3)
        assert policy.delay_for(1) == pytest.approx(0.6)
        assert policy.delay_for(2) == pytest.approx(1.2)
        assert policy.delay_for(3) == pytest.approx(2.4)

    def test_delay_is_not_capped(self):
        """Test large attempt indexes keep growing."""
        policy = RetryPolicy(max_attempts=20, base_delay=1.0)
        assert policy.delay_for(15) == 2 ** 15

    def test_delays_and_worst_case(self):
        """Test the full delay schedule of an always-failing call."""
        policy = RetryPolicy(max_attempts=3, base_delay=0.3)
        assert policy.delays == pytest.approx([0.3, 0.6])
        assert policy.worst_case_delay == pytest.approx(0.9)

    def test_single_attempt_has_no_delays(self):
        """Test max_attempts=1 schedules no backoff."""
        assert RetryPolicy(max_attempts=1).delays == []

    def test_should_retry(self):
        """Test retry allowed strictly below max_attempts."""
        policy = RetryPolicy(max_attempts=3)
        assert policy.should_retry(1) is True
        assert policy.should_retry(2) is True
        assert policy.should_retry(3) is False

    @pytest.mark.parametrize("value", [0, -1])
    def test_rejects_non_positive_attempts(self, value):
        """Test max_attempts must be >= 1."""
        with pytest.raises(InvalidPolicyError, match="max_attempts"):
            RetryPolicy(max_attempts=value)

    @pytest.mark.parametrize("value", [2.5, "3", True])
    def test_rejects_non_integer_attempts(self, value):
        """Test max_attempts must be an int."""
        with pytest.raises(InvalidPolicyError):
            RetryPolicy(max_attempts=value)

    def test_rejects_negative_delay(self):
        """Test base_delay must be >= 0."""
        with pytest.raises(InvalidPolicyError, match="base_delay"):
            RetryPolicy(base_delay=-0.1)

    def test_invalid_policy_is_value_error(self):
        """Test InvalidPolicyError can be caught as ValueError."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_policy_is_immutable(self):
        """Test the policy cannot change after construction."""
        policy = RetryPolicy()
        with pytest.raises(AttributeError):
            policy.max_attempts = 10


class TestRetryWrapper:
    """Tests for retry() and RetryWrapper."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, producer, fake_sleep):
        """Test successful call makes one attempt and no sleep."""
        wrapped = retry(producer, sleep=fake_sleep)

        assert await wrapped() == "V"
        assert producer.call_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [1, 2, 3])
    async def test_succeeds_on_attempt_k(self, make_producer, fake_sleep, k):
        """Test a producer succeeding on attempt k is invoked exactly k times."""
        producer = make_producer(value="ok", failures=k - 1)
        wrapped = retry(producer, max_attempts=3, sleep=fake_sleep)

        assert await wrapped() == "ok"
        assert producer.call_count == k
        assert len(fake_sleep.delays) == k - 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("n", [1, 2, 3, 5])
    async def test_always_failing_exhausts_after_n_attempts(self, make_producer, fake_sleep, n):
        """Test an always-failing producer is invoked exactly n times."""
        producer = make_producer(failures=None)
        wrapped = retry(producer, max_attempts=n, base_delay=0.1, sleep=fake_sleep)

        with pytest.raises(RetryExhausted) as exc_info:
            await wrapped()

        assert producer.call_count == n
        assert exc_info.value.attempts == n
        assert f"{n} attempts" in str(exc_info.value)
        assert f"boom {n}" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_exhausted_error_chains_last_failure(self, make_producer, fake_sleep):
        """Test RetryExhausted keeps the final underlying failure."""
        producer = make_producer(failures=None)
        wrapped = retry(producer, max_attempts=2, sleep=fake_sleep)

        with pytest.raises(RetryExhausted) as exc_info:
            await wrapped()

        err = exc_info.value
        assert isinstance(err.last_error, ConnectionError)
        assert str(err.last_error) == "boom 2"
        assert err.__cause__ is err.last_error
        assert str(err) == "Failed after 2 attempts: boom 2"

    @pytest.mark.asyncio
    async def test_single_attempt_wraps_immediately(self, make_producer, fake_sleep):
        """Test max_attempts=1 makes no retry and no sleep."""
        producer = make_producer(failures=None)
        wrapped = retry(producer, max_attempts=1, sleep=fake_sleep)

        with pytest.raises(RetryExhausted, match="Failed after 1 attempts: boom 1"):
            await wrapped()

        assert producer.call_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_backoff_delays(self, make_producer, fake_sleep):
        """Test delays before attempts 2 and 3 are 0.3s and 0.6s."""
        producer = make_producer(value="V", failures=2)
        wrapped = retry(producer, max_attempts=3, base_delay=0.3, sleep=fake_sleep)

        assert await wrapped() == "V"
        assert producer.call_count == 3
        assert fake_sleep.delays == pytest.approx([0.3, 0.6])

    @pytest.mark.asyncio
    async def test_no_sleep_after_final_failure(self, make_producer, fake_sleep):
        """Test the last failure raises without a trailing sleep."""
        producer = make_producer(failures=None)
        wrapped = retry(producer, max_attempts=4, base_delay=0.5, sleep=fake_sleep)

        with pytest.raises(RetryExhausted):
            await wrapped()

        assert fake_sleep.delays == pytest.approx([0.5, 1.0, 2.0])

    @pytest.mark.asyncio
    async def test_zero_base_delay(self, make_producer, fake_sleep):
        """Test base_delay=0 retries immediately."""
        producer = make_producer(failures=2)
        wrapped = retry(producer, max_attempts=3, base_delay=0, sleep=fake_sleep)

        assert await wrapped() == "V"
        assert fake_sleep.delays == [0, 0]

    @pytest.mark.asyncio
    async def test_state_is_per_invocation(self, make_producer, fake_sleep):
        """Test attempt counters reset between calls."""
        producer = make_producer(failures=2)
        wrapped = retry(producer, max_attempts=3, sleep=fake_sleep)

        assert await wrapped() == "V"
        assert producer.call_count == 3

        # Producer now succeeds; the second call must not inherit any attempts.
        assert await wrapped() == "V"
        assert producer.call_count == 4
        assert len(fake_sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_arguments_forwarded(self, producer, fake_sleep):
        """Test positional and keyword arguments reach the producer."""
        wrapped = retry(producer, sleep=fake_sleep)

        await wrapped(1, "two", flag=True)
        assert producer.calls == [((1, "two"), {"flag": True})]

    @pytest.mark.asyncio
    async def test_retry_events(self, make_producer, fake_sleep):
        """Test a RetryAttempt is emitted before each backoff."""
        observer = RecordingObserver()
        producer = make_producer(failures=2)
        wrapped = retry(producer, max_attempts=3, base_delay=0.3, observer=observer, sleep=fake_sleep)

        await wrapped()

        events = observer.of_type(RetryAttempt)
        assert [e.attempt_number for e in events] == [1, 2]
        assert [e.delay for e in events] == pytest.approx([0.3, 0.6])
        assert all(e.max_attempts == 3 for e in events)
        assert str(events[0].error) == "boom 1"

    @pytest.mark.asyncio
    async def test_cancellation_during_backoff_stops_retrying(self, make_producer):
        """Test cancelling during a backoff sleep propagates and ends the sequence."""
        sleeping = asyncio.Event()

        async def blocking_sleep(seconds: float) -> None:
            sleeping.set()
            await asyncio.Event().wait()

        producer = make_producer(failures=None)
        wrapped = retry(producer, max_attempts=5, sleep=blocking_sleep)

        task = asyncio.create_task(wrapped())
        await sleeping.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert producer.call_count == 1

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self, fake_sleep):
        """Test CancelledError from the producer is not treated as a failure."""
        calls = 0

        async def cancelled():
            nonlocal calls
            calls += 1
            raise asyncio.CancelledError()

        wrapped = retry(cancelled, max_attempts=3, sleep=fake_sleep)

        with pytest.raises(asyncio.CancelledError):
            await wrapped()
        assert calls == 1
        assert fake_sleep.delays == []

    def test_preserves_function_metadata(self):
        """Test wrapper keeps the producer's name and docstring."""

        async def fetch_posts():
            """Fetch posts."""

        wrapped = retry(fetch_posts)
        assert wrapped.__name__ == "fetch_posts"
        assert wrapped.__doc__ == "Fetch posts."
        assert wrapped.wrapped is fetch_posts

    def test_invalid_arguments_fail_at_wrap_time(self, producer):
        """Test bad configuration is rejected before any call."""
        with pytest.raises(InvalidPolicyError):
            retry(producer, max_attempts=0)


class TestWithRetryDecorator:
    """Tests for @with_retry."""

    @pytest.mark.asyncio
    async def test_decorator(self, fake_sleep):
        """Test decorator form retries like retry()."""
        calls = 0

        @with_retry(max_attempts=4, base_delay=0.1, sleep=fake_sleep)
        async def flaky():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ValueError("temp")
            return "result"

        assert isinstance(flaky, RetryWrapper)
        assert await flaky() == "result"
        assert calls == 3
        assert fake_sleep.delays == pytest.approx([0.1, 0.2])

    def test_decorator_validates_eagerly(self):
        """Test a bad decorator fails before decorating."""
        with pytest.raises(InvalidPolicyError):
            with_retry(base_delay=-1)


class TestRetryContext:
    """Tests for RetryContext."""

    @pytest.mark.asyncio
    async def test_tracks_attempts_and_delays(self, make_producer, fake_sleep):
        """Test context records attempts, last error, and delays."""
        producer = make_producer(failures=1)
        ctx = RetryContext(RetryPolicy(max_attempts=3, base_delay=0.2), sleep=fake_sleep)

        assert await ctx.run(producer) == "V"
        assert ctx.attempts == 2
        assert str(ctx.last_error) == "boom 1"
        assert ctx.delays == pytest.approx([0.2])
