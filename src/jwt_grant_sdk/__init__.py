"""JWT bearer grant SDK: signed assertions, token exchange, resilient API calls."""

from .assertion import AssertionBuilder, SigningKey, build_assertion, build_claims
from .async_client import AsyncGrantClient
from .async_invoker import AsyncAPIInvoker
from .broker import AsyncTokenBroker, TokenBroker
from .client import GrantClient
from .config import GrantConfig, TelemetryConfig, derive_candidates
from .errors import (
    AllCandidatesFailedError,
    AuthRejectedError,
    ErrorCode,
    GrantSDKError,
    HTTPError,
    InvalidConfigError,
    KeyFormatError,
    MalformedResponseError,
    ProbeCancelledError,
    TokenExpiredError,
    TransportError,
)
from .invoker import APIInvoker
from .models import (
    APIResult,
    BinaryPayload,
    CandidateFailure,
    ServiceIdentity,
    Token,
)
from .telemetry import configure_telemetry

__all__ = [
    "AssertionBuilder",
    "SigningKey",
    "build_assertion",
    "build_claims",
    "TokenBroker",
    "AsyncTokenBroker",
    "APIInvoker",
    "AsyncAPIInvoker",
    "GrantClient",
    "AsyncGrantClient",
    "GrantConfig",
    "TelemetryConfig",
    "derive_candidates",
    "configure_telemetry",
    "GrantSDKError",
    "ErrorCode",
    "KeyFormatError",
    "AuthRejectedError",
    "MalformedResponseError",
    "TransportError",
    "HTTPError",
    "AllCandidatesFailedError",
    "ProbeCancelledError",
    "TokenExpiredError",
    "InvalidConfigError",
    "ServiceIdentity",
    "Token",
    "APIResult",
    "BinaryPayload",
    "CandidateFailure",
]

__version__ = "0.1.0"
