"""Tests for the in-memory sliding-window rate limiter."""

import pytest
import threading
from datetime import datetime, timedelta, timezone

from modules.ratelimit.exceptions import RateLimitedError
from modules.ratelimit.interfaces import IRateLimiter
from modules.ratelimit.models import RateWindow
from modules.ratelimit.service import InMemoryRateLimiter
from shared.exceptions import RateLimitError

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
WINDOW = timedelta(minutes=15)


@pytest.fixture
def limiter():
    return InMemoryRateLimiter()


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


class TestSlidingWindow:
    def test_five_attempts_then_limited(self, limiter):
        """Five calls at t=0 pass; a sixth at t=1s is limited."""
        for _ in range(5):
            limiter.check("user-1", "login", T0, 5, WINDOW)

        with pytest.raises(RateLimitedError):
            limiter.check("user-1", "login", at(1), 5, WINDOW)

    def test_allows_again_after_window(self, limiter):
        """A sixth call passes once the first attempts have aged out."""
        for _ in range(5):
            limiter.check("user-1", "login", T0, 5, WINDOW)

        decision = limiter.check("user-1", "login", at(16 * 60), 5, WINDOW)
        assert decision.allowed is True

    def test_entry_exactly_window_old_is_pruned(self, limiter):
        """An attempt exactly one window old no longer counts."""
        limiter.check("user-1", "login", T0, 1, WINDOW)
        limiter.check("user-1", "login", T0 + WINDOW, 1, WINDOW)

    def test_entry_just_inside_window_counts(self, limiter):
        limiter.check("user-1", "login", T0, 1, WINDOW)
        with pytest.raises(RateLimitedError):
            limiter.check("user-1", "login", T0 + WINDOW - timedelta(microseconds=1), 1, WINDOW)

    def test_window_slides(self, limiter):
        """Attempts age out one by one, not all at once."""
        limiter.check("user-1", "a", at(0), 2, WINDOW)
        limiter.check("user-1", "a", at(600), 2, WINDOW)
        limiter.check("user-1", "a", at(900), 2, WINDOW)
        with pytest.raises(RateLimitedError):
            limiter.check("user-1", "a", at(1000), 2, WINDOW)

    def test_rejected_attempts_are_not_recorded(self, limiter):
        """A rejected attempt should not extend the lockout."""
        limiter.check("user-1", "a", at(0), 1, WINDOW)
        for second in range(1, 10):
            with pytest.raises(RateLimitedError):
                limiter.check("user-1", "a", at(second), 1, WINDOW)
        assert limiter.attempts("user-1", "a") == 1
        limiter.check("user-1", "a", at(900), 1, WINDOW)

    def test_keys_are_independent(self, limiter):
        """Limits apply per (principal, action) pair."""
        limiter.check("user-1", "a", T0, 1, WINDOW)
        limiter.check("user-1", "b", T0, 1, WINDOW)
        limiter.check("user-2", "a", T0, 1, WINDOW)
        with pytest.raises(RateLimitedError):
            limiter.check("user-1", "a", T0, 1, WINDOW)

    def test_decision_reports_remaining(self, limiter):
        first = limiter.check("user-1", "a", T0, 3, WINDOW)
        second = limiter.check("user-1", "a", T0, 3, WINDOW)
        assert (first.remaining, second.remaining) == (2, 1)
        assert first.limit == 3
        assert first.window_seconds == 900

    def test_retry_after(self, limiter):
        """Retry-After should count down to when the oldest attempt ages out."""
        limiter.check("user-1", "a", T0, 1, WINDOW)
        with pytest.raises(RateLimitedError) as exc_info:
            limiter.check("user-1", "a", at(60), 1, WINDOW)

        error = exc_info.value
        assert error.retry_after_seconds == 840
        assert error.code == "RATE_LIMITED"
        assert error.details["action"] == "a"
        assert isinstance(error, RateLimitError)

    def test_invalid_limit(self, limiter):
        with pytest.raises(ValueError):
            limiter.check("user-1", "a", T0, 0, WINDOW)

    def test_empty_window_is_destroyed(self, limiter):
        """A key whose attempts all aged out is removed on next access."""
        limiter.check("user-1", "a", T0, 1, WINDOW)
        limiter.check("user-2", "a", T0 + WINDOW, 1, WINDOW)
        assert ("user-1", "a") in limiter
        limiter.check("user-1", "a", T0 + 2 * WINDOW, 1, WINDOW)
        assert limiter.attempts("user-1", "a") == 1

    def test_concurrent_checks_never_exceed_limit(self, limiter):
        """Parallel checks on one key admit exactly max_attempts."""
        admitted = []
        rejected = []
        barrier = threading.Barrier(20)

        def attempt():
            barrier.wait()
            try:
                limiter.check("user-1", "a", T0, 5, WINDOW)
                admitted.append(1)
            except RateLimitedError:
                rejected.append(1)

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(admitted) == 5
        assert len(rejected) == 15


class TestReclamation:
    def test_sweep_reclaims_idle_keys(self, limiter):
        """sweep() drops windows whose attempts have all aged out."""
        limiter.check("user-1", "a", T0, 5, WINDOW)
        limiter.check("user-2", "a", at(600), 5, WINDOW)

        removed = limiter.sweep(T0 + WINDOW)

        assert removed == 1
        assert ("user-1", "a") not in limiter
        assert ("user-2", "a") in limiter

    def test_max_keys_evicts_least_recently_used(self):
        """Creating a window beyond max_keys evicts the least recently used one."""
        limiter = InMemoryRateLimiter(max_keys=2)
        limiter.check("user-1", "a", T0, 5, WINDOW)
        limiter.check("user-2", "a", T0, 5, WINDOW)
        limiter.check("user-1", "a", at(1), 5, WINDOW)
        limiter.check("user-3", "a", at(2), 5, WINDOW)

        assert len(limiter) == 2
        assert ("user-2", "a") not in limiter
        assert ("user-1", "a") in limiter

    def test_reset_one_principal(self, limiter):
        limiter.check("user-1", "a", T0, 5, WINDOW)
        limiter.check("user-1", "b", T0, 5, WINDOW)
        limiter.check("user-2", "a", T0, 5, WINDOW)
        limiter.reset("user-1")
        assert len(limiter) == 1
        limiter.reset()
        assert len(limiter) == 0

    def test_invalid_max_keys(self):
        with pytest.raises(ValueError):
            InMemoryRateLimiter(max_keys=0)


class TestRateWindow:
    def test_prune_keeps_strictly_newer(self):
        window = RateWindow(window=WINDOW)
        window.timestamps.extend([T0, at(1), at(2)])
        window.prune(at(1) + WINDOW)
        assert list(window.timestamps) == [at(2)]

    def test_retry_after_at_least_one_second(self):
        window = RateWindow(window=timedelta(seconds=10))
        window.timestamps.append(T0)
        assert window.retry_after_seconds(T0 + timedelta(seconds=9, milliseconds=900)) == 1


def test_limiter_satisfies_interface():
    assert isinstance(InMemoryRateLimiter(), IRateLimiter)
