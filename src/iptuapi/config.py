"""Configuration objects for the IPTU API Python SDK."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from .retry import RetryPolicy

DEFAULT_BASE_URL = "https://iptuapi.com.br/api/v1"
DEFAULT_TIMEOUT = 30.0
VERSION = "1.0.0"
DEFAULT_USER_AGENT = f"iptuapi-python/{VERSION}"


class Logger(Protocol):
    """Anything with the level methods of :class:`logging.Logger`."""

    def debug(self, msg: str, *args: object) -> None: ...

    def info(self, msg: str, *args: object) -> None: ...

    def warning(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=dict)
    logger: Optional[Logger] = None
    auto_idempotency: bool = True

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key must be provided")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def get_logger(self) -> Logger:
        return self.logger if self.logger is not None else logging.getLogger("iptuapi")

    @classmethod
    def from_env(cls, **overrides) -> "ClientConfig":
        api_key = os.environ.get("IPTU_API_KEY")
        if not api_key:
            raise ValueError("IPTU_API_KEY environment variable is required")

        values: dict = {"api_key": api_key}
        base_url = os.environ.get("IPTU_API_BASE_URL")
        if base_url:
            values["base_url"] = base_url
        timeout = os.environ.get("IPTU_API_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)
        max_retries = os.environ.get("IPTU_API_MAX_RETRIES")
        if max_retries:
            values["retry"] = RetryPolicy(max_retries=int(max_retries))

        values.update(overrides)
        return cls(**values)


__all__ = ["ClientConfig", "DEFAULT_BASE_URL", "DEFAULT_TIMEOUT", "DEFAULT_USER_AGENT", "Logger", "VERSION"]
