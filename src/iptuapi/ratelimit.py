"""Rate-limit tracking from IPTU API response headers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"
REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class RateLimitSnapshot:
    limit: int
    remaining: int
    reset: int

    @property
    def reset_time(self) -> datetime:
        return datetime.fromtimestamp(self.reset, tz=timezone.utc)


def parse_header_int(value: Optional[str]) -> Optional[int]:
    """Parse a header as a plain ASCII integer with an optional sign."""
    if value is None:
        return None
    text = value.strip()
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    return int(text)


def extract_rate_limit(headers: Mapping[str, str]) -> Optional[RateLimitSnapshot]:
    """Return a snapshot only when limit, remaining and reset all parse as integers."""
    limit = parse_header_int(headers.get(LIMIT_HEADER))
    remaining = parse_header_int(headers.get(REMAINING_HEADER))
    reset = parse_header_int(headers.get(RESET_HEADER))
    if limit is None or remaining is None or reset is None:
        return None
    return RateLimitSnapshot(limit=limit, remaining=remaining, reset=reset)


class RateLimitState:
    """Latest rate-limit snapshot and request id seen by one client."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: Optional[RateLimitSnapshot] = None
        self._last_request_id: Optional[str] = None

    @property
    def snapshot(self) -> Optional[RateLimitSnapshot]:
        with self._lock:
            return self._snapshot

    @property
    def last_request_id(self) -> Optional[str]:
        with self._lock:
            return self._last_request_id

    def record(self, headers: Mapping[str, str]) -> None:
        snapshot = extract_rate_limit(headers)
        request_id = headers.get(REQUEST_ID_HEADER)
        if snapshot is None and not request_id:
            return
        with self._lock:
            if snapshot is not None:
                self._snapshot = snapshot
            if request_id:
                self._last_request_id = request_id


__all__ = [
    "LIMIT_HEADER",
    "REMAINING_HEADER",
    "REQUEST_ID_HEADER",
    "RESET_HEADER",
    "RateLimitSnapshot",
    "RateLimitState",
    "extract_rate_limit",
    "parse_header_int",
]
