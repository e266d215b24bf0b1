"""Centralized token operations for the JWT grant SDK.

Provides the token request building and response classification used by
both sync and async brokers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ..config import JWT_BEARER_GRANT
from ..errors import MalformedResponseError
from ..http import is_success
from ..models import Token, TokenResponse
from .errors import ErrorFactory

if TYPE_CHECKING:
    import httpx


class TokenOperations:
    """Token exchange logic shared by sync and async brokers.

    Holds no token state: each exchange yields a new ``Token`` that the
    caller owns for one logical request.
    """

    @staticmethod
    def build_jwt_bearer_request(assertion: str) -> dict[str, str]:
        """Build JWT bearer grant request payload.

        Args:
            assertion: Compact signed assertion.

        Returns:
            Form payload.
        """
        return {
            "grant_type": JWT_BEARER_GRANT,
            "assertion": assertion,
        }

    @staticmethod
    def build_token_request_headers() -> dict[str, str]:
        """Build headers for token request."""
        return {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

    @staticmethod
    def process_token_response(
        response: httpx.Response,
        *,
        received_at: datetime | None = None,
    ) -> Token:
        """Classify a token endpoint response.

        Args:
            response: Raw response from the token endpoint.
            received_at: Time the response arrived, for expiry calculation.

        Returns:
            Token wrapping the issued access token.

        Raises:
            AuthRejectedError: On any non-2xx status.
            MalformedResponseError: On 2xx without a usable ``access_token``.
        """
        if not is_success(response.status_code):
            raise ErrorFactory.auth_rejected(response)

        try:
            body: Any = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Token response body is not JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict) or not body.get("access_token"):
            raise MalformedResponseError(status_code=response.status_code)

        try:
            token_response = TokenResponse.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Token response has invalid fields: "
                f"{', '.join('.'.join(map(str, err['loc'])) for err in e.errors())}",
                status_code=response.status_code,
            ) from None

        return Token.from_response(
            token_response,
            received_at=received_at or datetime.now(UTC),
        )
