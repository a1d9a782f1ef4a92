"""Retry policy and backoff calculation for the IPTU API client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

DEFAULT_RETRYABLE_STATUSES: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})


def backoff_delay(retry_index: int, initial_delay: float, backoff_factor: float, max_delay: float) -> float:
    """Delay in seconds before retry number ``retry_index`` (0 for the first retry)."""
    if retry_index < 0:
        raise ValueError("retry_index must be >= 0")
    return min(initial_delay * (backoff_factor**retry_index), max_delay)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay: float = 0.5
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    retryable_statuses: FrozenSet[int] = DEFAULT_RETRYABLE_STATUSES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        # Accept any iterable of ints from callers, store it frozen.
        object.__setattr__(self, "retryable_statuses", frozenset(self.retryable_statuses))

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, retry_index: int) -> float:
        return backoff_delay(retry_index, self.initial_delay, self.backoff_factor, self.max_delay)

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        return cls(max_retries=0)


__all__ = ["DEFAULT_RETRYABLE_STATUSES", "RetryPolicy", "backoff_delay"]
