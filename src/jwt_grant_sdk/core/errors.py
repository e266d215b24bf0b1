"""Centralized error factory for the JWT grant SDK.

Provides consistent error creation and transformation across all SDK components.
"""

from __future__ import annotations

import httpx

from ..errors import (
    AuthRejectedError,
    ErrorCode,
    GrantSDKError,
    HTTPError,
    InvalidConfigError,
    TransportError,
    truncate_body,
)
from ..models import CandidateFailure


class ErrorFactory:
    """Centralized error creation with consistent structure.

    Token endpoint rejections and API rejections are separate classes so
    "credentials are wrong" is never confused with "this path does not exist".
    """

    @staticmethod
    def auth_rejected(response: httpx.Response) -> AuthRejectedError:
        """Create error for a non-2xx token endpoint response."""
        return AuthRejectedError(response.status_code, response.text)

    @staticmethod
    def from_http_response(
        response: httpx.Response,
        *,
        url: str | None = None,
    ) -> HTTPError:
        """Create error for a non-2xx API response."""
        return HTTPError(
            response.status_code,
            response.text,
            url=url,
        )

    @staticmethod
    def from_exception(
        exc: Exception,
        *,
        url: str | None = None,
    ) -> GrantSDKError:
        """Create SDK error from a request level exception.

        Args:
            exc: Original exception.
            url: Request URL.

        Returns:
            ``InvalidConfigError`` for unparseable URLs, ``TransportError``
            for other httpx failures; SDK errors pass through.
        """
        if isinstance(exc, GrantSDKError):
            return exc

        if isinstance(exc, httpx.InvalidURL):
            return InvalidConfigError(f"Invalid request URL {url!r}: {exc}", field="url")

        if isinstance(exc, httpx.TimeoutException):
            return TransportError(
                f"Request timed out: {type(exc).__name__}",
                url=url,
                timeout=True,
                cause=exc,
            )

        if isinstance(exc, httpx.ConnectError):
            return TransportError(
                f"Connection failed: {exc}",
                url=url,
                cause=exc,
            )

        return TransportError(
            f"HTTP transport error: {exc}",
            url=url,
            cause=exc,
        )

    @staticmethod
    def candidate_failure(
        candidate: str,
        url: str,
        error: GrantSDKError,
    ) -> CandidateFailure:
        """Record one failed probe attempt."""
        if isinstance(error, HTTPError):
            detail = error.body_text
        else:
            detail = truncate_body(error.message, 512)
        return CandidateFailure(
            candidate=candidate,
            url=url,
            kind=ErrorCode(error.code),
            status_code=error.status_code,
            detail=detail,
        )
