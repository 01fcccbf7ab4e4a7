# tests/unit/test_backoff.py
"""
Unit tests for the backoff policy and retry primitive.
"""

import random
import threading

import pytest

from cni_introspect.backoff import SimpleBackoff, retry_with_backoff
from cni_introspect.config import BackoffSettings


class TestSimpleBackoff:
    """Tests for delay computation."""

    def test_base_grows_and_caps(self):
        backoff = SimpleBackoff(minimum=1.0, maximum=60.0, jitter=0.0, multiple=2.0)
        delays = [backoff.duration() for _ in range(9)]
        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 60.0, 60.0, 60.0]

    @pytest.mark.parametrize("seed", range(20))
    def test_jittered_delays_stay_in_bounds(self, seed):
        backoff = SimpleBackoff(
            minimum=1.0, maximum=60.0, jitter=0.2, multiple=2.0, rng=random.Random(seed)
        )
        bases = []
        delays = []
        for _ in range(15):
            bases.append(backoff.current)
            delays.append(backoff.duration())

        assert bases == sorted(bases)
        assert delays[0] >= 1.0 * (1 - 0.2)
        assert all(d <= 60.0 * (1 + 0.2) for d in delays)
        for base, delay in zip(bases, delays):
            assert base * 0.8 <= delay <= base * 1.2

    def test_reset(self):
        backoff = SimpleBackoff(minimum=1.0, maximum=8.0, jitter=0.0, multiple=2.0)
        backoff.duration()
        backoff.duration()
        backoff.reset()
        assert backoff.current == 1.0

    def test_from_settings(self):
        settings = BackoffSettings(minimum=0.5, maximum=4, multiple=3, jitter=0)
        backoff = SimpleBackoff.from_settings(settings)
        assert [backoff.duration() for _ in range(4)] == [0.5, 1.5, 4.0, 4.0]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"minimum": 0, "maximum": 1, "jitter": 0.1, "multiple": 2},
            {"minimum": 2, "maximum": 1, "jitter": 0.1, "multiple": 2},
            {"minimum": 1, "maximum": 2, "jitter": 1.0, "multiple": 2},
            {"minimum": 1, "maximum": 2, "jitter": 0.1, "multiple": 0.5},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            SimpleBackoff(**kwargs)


def fast_backoff() -> SimpleBackoff:
    return SimpleBackoff(minimum=0.001, maximum=0.004, jitter=0.2, multiple=2.0)


class TestRetryWithBackoff:
    """Tests for the retry loop."""

    def test_retries_until_success(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 4:
                raise OSError("address already in use")

        assert retry_with_backoff(fast_backoff(), flaky) is True
        assert len(calls) == 4

    def test_no_wait_on_first_success(self):
        backoff = fast_backoff()
        assert retry_with_backoff(backoff, lambda: None) is True
        assert backoff.current == 0.001

    def test_stop_interrupts_wait(self):
        stop = threading.Event()
        calls = []

        def failing():
            calls.append(1)
            stop.set()
            raise RuntimeError("boom")

        slow = SimpleBackoff(minimum=30.0, maximum=60.0, jitter=0.0, multiple=2.0)
        assert retry_with_backoff(slow, failing, stop=stop) is False
        assert len(calls) == 1
