"""
Request pacing for the ORCID API client.

Permits are released at a fixed interval (1/N seconds for N requests per
second), like a ticker. Idle time does not accumulate into a burst.
"""

import logging
import threading
import time
from typing import Optional

from orcid_cancel import CancelToken
from orcid_exceptions import CancelledError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Thread-safe pacing limiter shared by all requests of a client."""

    def __init__(self, requests_per_second: float):
        self.requests_per_second = requests_per_second
        self.lock = threading.Lock()
        if self.enabled:
            self.interval = 1.0 / requests_per_second
            self._next_slot = time.monotonic() + self.interval
        else:
            self.interval = 0.0
            self._next_slot = 0.0

    @property
    def enabled(self) -> bool:
        return self.requests_per_second > 0

    def _reserve(self) -> float:
        with self.lock:
            slot = max(self._next_slot, time.monotonic())
            self._next_slot = slot + self.interval
            return slot

    def _release(self, slot: float) -> None:
        # only the latest reservation can be handed back; earlier slots
        # already have later callers queued behind them
        with self.lock:
            if self._next_slot == slot + self.interval:
                self._next_slot = slot

    def acquire(self, cancel: Optional[CancelToken] = None) -> None:
        """
        Block until the next permit is available.

        A caller cancelled while waiting returns its slot when no later
        caller has queued behind it.

        Args:
            cancel: Token polled while waiting

        Raises:
            CancelledError: If the token fires before the permit is granted
        """
        if cancel is not None:
            cancel.raise_if_cancelled("rate limit wait")
        if not self.enabled:
            return

        slot = self._reserve()
        delay = slot - time.monotonic()
        if delay <= 0:
            return
        logger.debug(f"Waiting {delay:.3f}s for rate limit permit")
        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            self._release(slot)
            raise CancelledError("rate limit wait aborted: cancelled")
