"""Error classes for the JWT grant SDK.

Every failure carries an ``ErrorCode`` so callers can branch on the kind of
failure without matching on message text. Messages and details never carry
key material or token values.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import CandidateFailure

# Upper bound on how much of an upstream response body is kept on an error.
MAX_BODY_TEXT = 2048


class ErrorCode(StrEnum):
    """Standardized error codes for the JWT grant SDK."""

    # Key material errors (1xxx)
    KEY_FORMAT = "KEY_1001"

    # Authorization server errors (2xxx)
    AUTH_REJECTED = "AUTH_2001"
    MALFORMED_RESPONSE = "AUTH_2002"
    TOKEN_EXPIRED = "AUTH_2003"

    # Transport errors (3xxx)
    TRANSPORT_ERROR = "NET_3001"
    TIMEOUT_ERROR = "NET_3002"

    # Downstream API errors (4xxx)
    HTTP_ERROR = "API_4001"
    ALL_CANDIDATES_FAILED = "API_4002"
    CANCELLED = "API_4003"
    MALFORMED_API_RESPONSE = "API_4004"

    # Configuration errors (5xxx)
    INVALID_CONFIG = "CFG_5001"


def truncate_body(text: str | None, limit: int = MAX_BODY_TEXT) -> str:
    """Trim an upstream response body for inclusion in an error."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated {len(text) - limit} chars]"


class GrantSDKError(Exception):
    """Base error for the JWT grant SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if isinstance(code, str) else code.value
        self.status_code = status_code
        self.details = details or {}

    @property
    def kind(self) -> ErrorCode:
        """Failure kind as an ``ErrorCode`` member."""
        return ErrorCode(self.code)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class KeyFormatError(GrantSDKError):
    """Signing key material could not be decoded or imported."""

    def __init__(self, message: str = "Invalid signing key material") -> None:
        super().__init__(message, ErrorCode.KEY_FORMAT)


class AuthRejectedError(GrantSDKError):
    """Authorization server rejected the assertion."""

    def __init__(self, status_code: int, body_text: str = "") -> None:
        self.body_text = truncate_body(body_text)
        super().__init__(
            f"Authorization server rejected assertion: {status_code} {self.body_text}".rstrip(),
            ErrorCode.AUTH_REJECTED,
            status_code=status_code,
            details={"body": self.body_text},
        )


class MalformedResponseError(GrantSDKError):
    """Success response had an unexpected shape.

    Token endpoint responses use ``MALFORMED_RESPONSE``; downstream API
    responses pass ``MALFORMED_API_RESPONSE``.
    """

    def __init__(
        self,
        message: str = "Token response did not contain an access token",
        *,
        status_code: int | None = None,
        code: ErrorCode = ErrorCode.MALFORMED_RESPONSE,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
        )


class TokenExpiredError(GrantSDKError):
    """Bearer token is past its expiry and must not be presented."""

    def __init__(self, message: str = "Access token has expired") -> None:
        super().__init__(message, ErrorCode.TOKEN_EXPIRED)


class TransportError(GrantSDKError):
    """No response was obtained (DNS, TLS, connection or timeout failure)."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        url: str | None = None,
        timeout: bool = False,
        cause: Exception | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if url:
            details["url"] = url
        if cause is not None:
            details["cause"] = type(cause).__name__
        super().__init__(
            message,
            ErrorCode.TIMEOUT_ERROR if timeout else ErrorCode.TRANSPORT_ERROR,
            details=details,
        )
        self.url = url
        self.timeout = timeout
        self.__cause__ = cause


class HTTPError(GrantSDKError):
    """Downstream API responded with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body_text: str = "",
        *,
        url: str | None = None,
    ) -> None:
        self.body_text = truncate_body(body_text)
        self.url = url
        details: dict[str, Any] = {"body": self.body_text}
        if url:
            details["url"] = url
        super().__init__(
            f"API request failed: {status_code} {self.body_text}".rstrip(),
            ErrorCode.HTTP_ERROR,
            status_code=status_code,
            details=details,
        )


def _history_details(history: list[CandidateFailure]) -> list[dict[str, Any]]:
    return [failure.model_dump(mode="json") for failure in history]


def _history_summary(history: list[CandidateFailure]) -> str:
    return "; ".join(f"{failure.candidate} -> {failure.describe()}" for failure in history)


class AllCandidatesFailedError(GrantSDKError):
    """Every candidate base path of a probe failed."""

    def __init__(self, history: list[CandidateFailure]) -> None:
        self.history = list(history)
        super().__init__(
            f"All {len(self.history)} endpoint candidates failed: "
            f"{_history_summary(self.history)}",
            ErrorCode.ALL_CANDIDATES_FAILED,
            details={"history": _history_details(self.history)},
        )


class ProbeCancelledError(GrantSDKError):
    """Candidate probe was cancelled before a candidate succeeded.

    Raised directly when a sync probe's cancel event is set. When an async
    probe is cancelled, the original ``asyncio.CancelledError`` propagates
    unchanged and carries this error as its ``__cause__``.
    """

    def __init__(self, history: list[CandidateFailure] | None = None) -> None:
        self.history = list(history or [])
        super().__init__(
            f"Endpoint probe cancelled after {len(self.history)} attempt(s)",
            ErrorCode.CANCELLED,
            details={"history": _history_details(self.history)},
        )


class InvalidConfigError(GrantSDKError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )
