"""Request execution pipeline: send, classify, back off, retry."""

from __future__ import annotations

import json
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

import httpx
import pydantic

from .config import ClientConfig
from .context import CallContext
from .errors import (
    NEVER_RETRIED,
    APIError,
    DecodeError,
    IPTUAPIError,
    NetworkError,
    classify,
    parse_error_envelope,
)
from .ratelimit import RateLimitState
from .retry import RetryPolicy


@lru_cache(maxsize=None)
def _adapter(target: Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(target)


def encode_query(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    encoded: Dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, Enum):
            encoded[key] = str(value.value)
        else:
            encoded[key] = str(value)
    return encoded


def encode_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, pydantic.BaseModel):
        return body.model_dump_json(exclude_none=True).encode("utf-8")
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


class RequestExecutor:
    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        state: Optional[RateLimitState] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(transport=transport)
        self._state = state or RateLimitState()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @config.setter
    def config(self, value: ClientConfig) -> None:
        self._config = value

    @property
    def state(self) -> RateLimitState:
        return self._state

    def _headers(self, config: ClientConfig, has_body: bool) -> Dict[str, str]:
        headers = {
            "X-API-Key": config.api_key,
            "User-Agent": config.user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        headers.update(config.headers)
        if has_body and config.auto_idempotency:
            headers["Idempotency-Key"] = uuid4().hex
        return headers

    def execute(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        target: Any = None,
        ctx: Optional[CallContext] = None,
    ) -> Any:
        """Run one logical call, retrying per the configured policy.

        Returns the body decoded into ``target`` (parsed JSON when ``target`` is
        None). Raises the classified error of the last attempt once retries run
        out, or :class:`~iptuapi.errors.CancelledError` when ``ctx`` finishes.
        """
        ctx = ctx or CallContext()
        config = self._config
        policy = config.retry
        logger = config.get_logger()

        url = f"{config.base_url}/{path.lstrip('/')}"
        query = encode_query(params)
        content = encode_body(body)
        # Built once so the idempotency key and body bytes match on every attempt.
        headers = self._headers(config, content is not None)

        last_error: Optional[IPTUAPIError] = None
        for attempt in range(policy.total_attempts):
            if attempt:
                delay = policy.delay(attempt - 1)
                logger.warning(
                    "Retrying %s %s attempt=%d delay=%.2fs error=%s",
                    method,
                    path,
                    attempt,
                    delay,
                    last_error,
                )
                if ctx.wait(delay):
                    raise ctx.error(self._state.last_request_id) from last_error
            ctx.raise_if_done(self._state.last_request_id)

            timeout = config.timeout
            remaining = ctx.remaining()
            if remaining is not None:
                timeout = min(timeout, remaining)

            request = self._client.build_request(
                method, url, params=query, content=content, headers=headers, timeout=timeout
            )
            logger.debug("Sending %s %s attempt=%d", method, request.url, attempt)
            try:
                response = self._client.send(request)
            except httpx.DecodingError as exc:
                # Body arrived but its Content-Encoding could not be undone.
                error = DecodeError(
                    f"undecodable response body: {exc}", request_id=self._state.last_request_id
                )
                logger.error("Request failed %s %s error=%s", method, path, error)
                raise error from exc
            except httpx.RequestError as exc:
                if ctx.done:
                    raise ctx.error(self._state.last_request_id) from exc
                last_error = NetworkError(
                    f"{type(exc).__name__}: {exc}", request_id=self._state.last_request_id
                )
                last_error.__cause__ = exc
                continue

            self._state.record(response.headers)
            if ctx.cancelled:
                raise ctx.error(self._state.last_request_id)

            if response.is_success:
                return self._decode(response, target)

            error = classify(parse_error_envelope(response, self._state.last_request_id))
            if not self._should_retry(error, policy):
                logger.error("Request failed %s %s error=%s", method, path, error)
                raise error
            last_error = error

        logger.error(
            "Request failed %s %s after %d attempts error=%s", method, path, policy.total_attempts, last_error
        )
        raise last_error

    @staticmethod
    def _should_retry(error: APIError, policy: RetryPolicy) -> bool:
        if error.kind in NEVER_RETRIED:
            return False
        return error.status_code in policy.retryable_statuses

    def _decode(self, response: httpx.Response, target: Any) -> Any:
        request_id = response.headers.get("X-Request-ID") or self._state.last_request_id
        if not response.content:
            if target is None:
                return None
            raise DecodeError(
                "empty response body", status_code=response.status_code, request_id=request_id
            )
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(
                f"invalid JSON in response: {exc}", status_code=response.status_code, request_id=request_id
            ) from exc
        if target is None:
            return data
        try:
            return _adapter(target).validate_python(data)
        except pydantic.ValidationError as exc:
            raise DecodeError(
                f"unexpected response shape: {exc}", status_code=response.status_code, request_id=request_id
            ) from exc

    def close(self) -> None:
        self._client.close()


__all__ = ["RequestExecutor", "encode_body", "encode_query"]
