"""Token brokers: exchange a signed assertion for a bearer token.

Each exchange is one POST to the token endpoint. Nothing is cached and
nothing is retried; a rejection surfaces unchanged as ``AuthRejectedError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .core.http_executor import AsyncHTTPExecutor, SyncHTTPExecutor
from .core.token_ops import TokenOperations
from .errors import GrantSDKError
from .telemetry import SDKLogger, trace_operation

if TYPE_CHECKING:
    import httpx

    from .assertion import AssertionBuilder
    from .models import Token


def _build_logged(builder: AssertionBuilder, logger: SDKLogger) -> str:
    claims = builder.claims()
    logger.debug(
        "Assertion built",
        issuer=claims.iss,
        audience=claims.aud,
        scope=claims.scope,
        iat=claims.iat,
        exp=claims.exp,
    )
    return builder.build(claims.iat)


class TokenBroker:
    """Synchronous JWT bearer grant token broker."""

    def __init__(
        self,
        client: httpx.Client,
        token_endpoint: str,
        *,
        logger: Any | None = None,
    ) -> None:
        """Initialize broker.

        Args:
            client: HTTP client with bounded timeouts.
            token_endpoint: Absolute token endpoint URL.
            logger: Optional structlog logger.
        """
        self.token_endpoint = token_endpoint
        self._logger = SDKLogger.wrap(logger)
        self._executor = SyncHTTPExecutor(client, self._logger)

    def exchange(self, assertion: str) -> Token:
        """Exchange one assertion for one token.

        Args:
            assertion: Compact signed assertion.

        Returns:
            Issued token.

        Raises:
            AuthRejectedError: Token endpoint answered with a non-2xx status.
            MalformedResponseError: 2xx without an access token.
            TransportError: No response was obtained.
        """
        with trace_operation("token_exchange", attributes={"http.url": self.token_endpoint}):
            try:
                response = self._executor.execute(
                    "POST",
                    self.token_endpoint,
                    data=TokenOperations.build_jwt_bearer_request(assertion),
                    headers=TokenOperations.build_token_request_headers(),
                )
                token = TokenOperations.process_token_response(response)
            except GrantSDKError as e:
                self._logger.warning(
                    "Token exchange failed",
                    endpoint=self.token_endpoint,
                    code=e.code,
                    status_code=e.status_code,
                )
                raise

        self._logger.info(
            "Token issued",
            endpoint=self.token_endpoint,
            scope=token.scope,
            expires_at=token.expires_at.isoformat() if token.expires_at else None,
        )
        return token

    def fetch_token(self, builder: AssertionBuilder) -> Token:
        """Build a fresh assertion and exchange it."""
        return self.exchange(_build_logged(builder, self._logger))


class AsyncTokenBroker:
    """Asynchronous JWT bearer grant token broker."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_endpoint: str,
        *,
        logger: Any | None = None,
    ) -> None:
        """Initialize broker.

        Args:
            client: Async HTTP client with bounded timeouts.
            token_endpoint: Absolute token endpoint URL.
            logger: Optional structlog logger.
        """
        self.token_endpoint = token_endpoint
        self._logger = SDKLogger.wrap(logger)
        self._executor = AsyncHTTPExecutor(client, self._logger)

    async def exchange(self, assertion: str) -> Token:
        """Exchange one assertion for one token.

        Raises:
            AuthRejectedError: Token endpoint answered with a non-2xx status.
            MalformedResponseError: 2xx without an access token.
            TransportError: No response was obtained.
        """
        with trace_operation("token_exchange", attributes={"http.url": self.token_endpoint}):
            try:
                response = await self._executor.execute(
                    "POST",
                    self.token_endpoint,
                    data=TokenOperations.build_jwt_bearer_request(assertion),
                    headers=TokenOperations.build_token_request_headers(),
                )
                token = TokenOperations.process_token_response(response)
            except GrantSDKError as e:
                self._logger.warning(
                    "Token exchange failed",
                    endpoint=self.token_endpoint,
                    code=e.code,
                    status_code=e.status_code,
                )
                raise

        self._logger.info(
            "Token issued",
            endpoint=self.token_endpoint,
            scope=token.scope,
            expires_at=token.expires_at.isoformat() if token.expires_at else None,
        )
        return token

    async def fetch_token(self, builder: AssertionBuilder) -> Token:
        """Build a fresh assertion and exchange it."""
        return await self.exchange(_build_logged(builder, self._logger))
