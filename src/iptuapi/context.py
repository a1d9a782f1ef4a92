"""Per-call cancellation and deadline signal."""

from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import CancelledError, DeadlineExceededError


class CallContext:
    """Cancellation token for one or more client calls.

    ``cancel()`` may be called from any thread. A ``timeout`` (seconds) turns the
    context into a deadline that expires on its own.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``; return True if the context finished first."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            return True
        return self._event.wait(seconds)

    def error(self, request_id: Optional[str] = None) -> CancelledError:
        if self.cancelled:
            return CancelledError("request cancelled", request_id=request_id)
        return DeadlineExceededError("request deadline exceeded", request_id=request_id)

    def raise_if_done(self, request_id: Optional[str] = None) -> None:
        if self.done:
            raise self.error(request_id)


__all__ = ["CallContext"]
