"""IPTU API Python SDK."""

from .client import IPTUClient
from .config import ClientConfig, VERSION
from .context import CallContext
from .errors import (
    APIError,
    AuthenticationError,
    CancelledError,
    DeadlineExceededError,
    DecodeError,
    ErrorKind,
    FieldError,
    ForbiddenError,
    IPTUAPIError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnknownAPIError,
    ValidationError,
)
from .models import Cidade, EvaluateParams, SimuladorParams, ValuationParams
from .ratelimit import RateLimitSnapshot
from .retry import RetryPolicy

__version__ = VERSION

__all__ = [
    "APIError",
    "AuthenticationError",
    "CallContext",
    "CancelledError",
    "Cidade",
    "ClientConfig",
    "DeadlineExceededError",
    "DecodeError",
    "ErrorKind",
    "EvaluateParams",
    "FieldError",
    "ForbiddenError",
    "IPTUAPIError",
    "IPTUClient",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "RateLimitSnapshot",
    "RetryPolicy",
    "ServerError",
    "SimuladorParams",
    "UnknownAPIError",
    "ValidationError",
    "ValuationParams",
]
