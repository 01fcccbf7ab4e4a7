"""
Exponential backoff with jitter.
"""

import random
import threading
from typing import Callable, Optional

from cni_introspect.config import BackoffSettings
from cni_introspect.utils import get_logger

logger = get_logger(__name__)


class SimpleBackoff:
    """
    Exponential backoff policy.

    `duration()` returns the current base delay with uniform jitter of up to
    +/- `jitter * base`, then grows the base by `multiple`, capped at
    `maximum`. The base sequence is therefore non-decreasing and every
    returned delay lies within [minimum * (1 - jitter), maximum * (1 + jitter)].
    """

    def __init__(
        self,
        minimum: float,
        maximum: float,
        jitter: float,
        multiple: float,
        rng: Optional[random.Random] = None,
    ):
        if minimum <= 0 or maximum < minimum:
            raise ValueError("backoff requires 0 < minimum <= maximum")
        if not 0 <= jitter < 1:
            raise ValueError("jitter must be in [0, 1)")
        if multiple < 1:
            raise ValueError("multiple must be >= 1")
        self.minimum = minimum
        self.maximum = maximum
        self.jitter = jitter
        self.multiple = multiple
        self._rng = rng or random.Random()
        self._current = minimum

    @classmethod
    def from_settings(
        cls, settings: BackoffSettings, rng: Optional[random.Random] = None
    ) -> "SimpleBackoff":
        return cls(
            minimum=settings.minimum,
            maximum=settings.maximum,
            jitter=settings.jitter,
            multiple=settings.multiple,
            rng=rng,
        )

    @property
    def current(self) -> float:
        """Base delay the next `duration()` call will jitter."""
        return self._current

    def duration(self) -> float:
        base = self._current
        self._current = min(self.maximum, self._current * self.multiple)
        spread = base * self.jitter
        return base + self._rng.uniform(-spread, spread)

    def reset(self) -> None:
        self._current = self.minimum


def retry_with_backoff(
    backoff: SimpleBackoff,
    fn: Callable[[], None],
    stop: Optional[threading.Event] = None,
) -> bool:
    """
    Call fn until it returns without raising.

    Every exception raised by fn counts as a retriable failure; fn is
    expected to report its own errors. Between attempts the calling thread
    waits `backoff.duration()` seconds, waking early if `stop` is set.

    Returns:
        True once fn succeeds, False if stop was set before that.
    """
    stop = stop or threading.Event()
    while True:
        try:
            fn()
            return True
        except Exception as e:
            delay = backoff.duration()
            logger.debug(f"Attempt failed ({e!r}), retrying in {delay:.2f}s")
        if stop.wait(delay):
            return False
