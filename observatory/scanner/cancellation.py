# observatory/scanner/cancellation.py
"""
Caller-owned cancellation for long waits.

The poll loop sleeps on CancelToken.wait(interval) instead of time.sleep(),
so a cancel() from another thread wakes it immediately. A token built with
CancelToken.with_timeout() also fires once its deadline passes and reports
DeadlineExceeded as its cause.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from observatory.errors import DeadlineExceeded, ObservatoryError, OperationCancelled


class CancelToken:
    """
    Thread-safe cancellation signal.

        token = CancelToken()
        threading.Timer(60, token.cancel).start()
        client.analyze("example.com", ScanOptions(wait_for_finish=True), cancel=token)
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None
        # Absolute time.monotonic() value, or None for no deadline.
        self._deadline = deadline
        self._expired = False

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        if self._expired:
            return 0.0
        return max(0.0, self._deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        if not self._expired and self._deadline is not None:
            self._expired = time.monotonic() >= self._deadline
        return self._expired

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def cause(self) -> Optional[ObservatoryError]:
        """Why the token fired, or None while it is still live."""
        if self._event.is_set():
            return OperationCancelled(self._reason or "cancelled by caller")
        if self.expired:
            return DeadlineExceeded("deadline exceeded")
        return None

    def wait(self, timeout: float) -> bool:
        """
        Block for up to `timeout` seconds. Returns True if the token fired
        (cancelled, or deadline reached) before or during the wait.
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= timeout:
            if not self._event.wait(remaining):
                self._expired = True
            return True
        return self._event.wait(timeout)
