"""Per-connection inbound message throttling."""

import time
from collections.abc import Callable


class TokenBucket:
    """Token bucket: refills at `rate` tokens/sec up to `burst`; each message costs one token."""

    def __init__(self, rate: float, burst: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._rate = rate
        self._burst = float(burst)
        self._clock = clock
        self._tokens = self._burst
        self._updated_at = clock()

    def consume(self) -> bool:
        """Take one token. Returns False when the caller should drop the message."""
        now = self._clock()
        self._tokens = min(self._burst, self._tokens + (now - self._updated_at) * self._rate)
        self._updated_at = now
        if self._tokens < 1.0:
            return False
        self._tokens -= 1.0
        return True
