"""Exception hierarchy and HTTP error classification for the IPTU API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from .ratelimit import parse_header_int

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
SERVER_STATUS_CODES = frozenset({500, 502, 503, 504})
VALIDATION_STATUS_CODES = frozenset({400, 422})

DEFAULT_MESSAGES: Dict[int, str] = {
    400: "Parâmetros inválidos",
    401: "API Key inválida ou expirada",
    403: "Plano não autorizado para este recurso",
    404: "Recurso não encontrado",
    422: "Parâmetros inválidos",
    429: "Limite de requisições excedido",
    500: "Erro interno do servidor",
    502: "Erro interno do servidor",
    503: "Serviço temporariamente indisponível",
    504: "Tempo de resposta do servidor esgotado",
}
FALLBACK_MESSAGE = "Erro na API"


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    SERVER = "server"
    NETWORK = "network"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    DECODE = "decode"
    UNKNOWN = "unknown"


# Kinds that surface on first occurrence no matter what the retry policy says.
NEVER_RETRIED = frozenset(
    {ErrorKind.AUTHENTICATION, ErrorKind.FORBIDDEN, ErrorKind.NOT_FOUND, ErrorKind.VALIDATION}
)


class IPTUAPIError(Exception):
    """Base class for every error raised by the client."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        text = self.message
        if self.status_code is not None:
            text = f"IPTU API error (status {self.status_code}): {text}"
        if self.request_id:
            text = f"{text} (request_id: {self.request_id})"
        return text


class APIError(IPTUAPIError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, *, request_id: Optional[str] = None) -> None:
        super().__init__(message, status_code=status_code, request_id=request_id)

    @property
    def is_retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES


class AuthenticationError(APIError):
    kind = ErrorKind.AUTHENTICATION


class ForbiddenError(APIError):
    kind = ErrorKind.FORBIDDEN

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        required_plan: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(status_code, message, request_id=request_id)
        self.required_plan = required_plan


class NotFoundError(APIError):
    kind = ErrorKind.NOT_FOUND


class RateLimitError(APIError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        retry_after: int = 0,
        limit: Optional[int] = None,
        remaining: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(status_code, message, request_id=request_id)
        self.retry_after = retry_after
        self.limit = limit
        self.remaining = remaining


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ValidationError(APIError):
    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        errors: Optional[List[FieldError]] = None,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(status_code, message, request_id=request_id)
        self.errors = list(errors or [])


class ServerError(APIError):
    kind = ErrorKind.SERVER


class UnknownAPIError(APIError):
    kind = ErrorKind.UNKNOWN


class NetworkError(IPTUAPIError):
    """The request failed before any response was received."""

    kind = ErrorKind.NETWORK


class CancelledError(IPTUAPIError):
    """The caller cancelled the call."""

    kind = ErrorKind.CANCELLED


class DeadlineExceededError(CancelledError):
    """The call's deadline passed before it completed."""

    kind = ErrorKind.TIMED_OUT


class DecodeError(IPTUAPIError):
    """A successful response body did not match the expected shape."""

    kind = ErrorKind.DECODE


@dataclass
class ErrorEnvelope:
    status_code: int
    message: str
    request_id: Optional[str] = None
    required_plan: Optional[str] = None
    retry_after: int = 0
    limit: Optional[int] = None
    remaining: Optional[int] = None
    errors: List[FieldError] = field(default_factory=list)


def _field_errors(body: Dict[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []
    items = body.get("errors")
    for item in items if isinstance(items, list) else []:
        if isinstance(item, dict):
            errors.append(FieldError(field=str(item.get("field", "")), message=str(item.get("message", ""))))
    detail = body.get("detail")
    if isinstance(detail, list):
        # FastAPI style: {"loc": ["query", "logradouro"], "msg": "field required"}
        for item in detail:
            if not isinstance(item, dict):
                continue
            loc = item.get("loc")
            parts = [str(part) for part in loc] if isinstance(loc, list) else []
            if parts and parts[0] in ("body", "query", "path", "header"):
                parts = parts[1:]
            errors.append(FieldError(field=".".join(parts), message=str(item.get("msg", ""))))
    return errors


def parse_error_envelope(response: httpx.Response, fallback_request_id: Optional[str] = None) -> ErrorEnvelope:
    """Read an error response into an :class:`ErrorEnvelope`.

    A body that is not a JSON object is ignored and the status-derived default
    message is used instead.
    """
    status = response.status_code
    headers = response.headers
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        body = {}

    message = ""
    detail = body.get("detail")
    if isinstance(detail, str):
        message = detail
    elif isinstance(body.get("message"), str):
        message = body["message"]
    if not message:
        message = DEFAULT_MESSAGES.get(status, FALLBACK_MESSAGE)

    required_plan = body.get("required_plan")
    return ErrorEnvelope(
        status_code=status,
        message=message,
        request_id=headers.get("X-Request-ID") or fallback_request_id,
        required_plan=str(required_plan) if required_plan is not None else None,
        retry_after=parse_header_int(headers.get("Retry-After")) or 0,
        limit=parse_header_int(headers.get("X-RateLimit-Limit")),
        remaining=parse_header_int(headers.get("X-RateLimit-Remaining")),
        errors=_field_errors(body),
    )


def classify(envelope: ErrorEnvelope) -> APIError:
    status = envelope.status_code
    message = envelope.message
    request_id = envelope.request_id

    if status == 401:
        return AuthenticationError(status, message, request_id=request_id)
    if status == 403:
        return ForbiddenError(status, message, required_plan=envelope.required_plan, request_id=request_id)
    if status == 404:
        return NotFoundError(status, message, request_id=request_id)
    if status == 429:
        return RateLimitError(
            status,
            message,
            retry_after=envelope.retry_after,
            limit=envelope.limit,
            remaining=envelope.remaining,
            request_id=request_id,
        )
    if status in VALIDATION_STATUS_CODES:
        return ValidationError(status, message, errors=envelope.errors, request_id=request_id)
    if status in SERVER_STATUS_CODES:
        return ServerError(status, message, request_id=request_id)
    return UnknownAPIError(status, message, request_id=request_id)


__all__ = [
    "APIError",
    "AuthenticationError",
    "CancelledError",
    "DeadlineExceededError",
    "DecodeError",
    "ErrorEnvelope",
    "ErrorKind",
    "FieldError",
    "ForbiddenError",
    "IPTUAPIError",
    "NEVER_RETRIED",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "UnknownAPIError",
    "ValidationError",
    "classify",
    "parse_error_envelope",
]
