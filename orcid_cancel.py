"""
Cooperative cancellation for ORCID API calls.

A CancelToken is handed to a call (or to a search iterator) by the
caller. The client polls it at every point where it may block: waiting
for a rate-limit permit, sleeping between retries, and around the
transport call itself.

Usage:
    token = CancelToken(timeout=5)
    client.get_record("0000-0002-1825-0097", cancel=token)

    # from another thread
    token.cancel()
"""

import threading
import time
from typing import Optional

from orcid_exceptions import CancelledError


class CancelToken:
    """Cancellation signal with an optional deadline."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the token.

        Args:
            timeout: Seconds from now after which the token counts as
                cancelled. None means no deadline.
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def with_timeout(cls, timeout: float) -> "CancelToken":
        return cls(timeout=timeout)

    def cancel(self) -> None:
        """Fire the signal. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """
        Sleep for up to ``seconds``, waking early on cancellation.

        Returns:
            True if the token was cancelled before the time elapsed
        """
        if seconds <= 0:
            return self.cancelled
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            return self.cancelled
        return self._event.wait(seconds) or self.cancelled

    def raise_if_cancelled(self, during: str = "call") -> None:
        if self.cancelled:
            expired = self._deadline is not None and time.monotonic() >= self._deadline
            reason = "deadline exceeded" if expired else "cancelled"
            raise CancelledError(f"{during} aborted: {reason}")
