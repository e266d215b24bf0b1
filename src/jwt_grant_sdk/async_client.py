"""Async JWT grant client.

Async counterpart of ``GrantClient``. Any number of logical requests may run
concurrently on one client: the only shared state is the connection pool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .assertion import AssertionBuilder
from .async_invoker import AsyncAPIInvoker
from .broker import AsyncTokenBroker
from .documents import AsyncDocumentsAPI
from .envelopes import AsyncEnvelopesAPI
from .http import create_async_http_client
from .telemetry import SDKLogger

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from .assertion import SigningKey
    from .config import GrantConfig
    from .models import APIResult, BinaryPayload, Token


class AsyncGrantClient:
    """Asynchronous client for JWT bearer grant access to a downstream API."""

    def __init__(
        self,
        config: GrantConfig,
        *,
        signing_key: SigningKey | None = None,
        logger: Any | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize async client.

        Args:
            config: SDK configuration.
            signing_key: Preloaded key; loaded from ``config`` when omitted.
            logger: Optional structlog logger.
            transport: Optional httpx transport override.
        """
        self.config = config
        self._logger = SDKLogger.wrap(logger)
        self._builder = AssertionBuilder(config.identity, signing_key or config.signing_key())
        self._http = create_async_http_client(config, transport=transport)
        self._broker = AsyncTokenBroker(self._http, config.token_endpoint or "", logger=self._logger)
        self._invoker = AsyncAPIInvoker(
            self._http, base_url=config.api_base_path, logger=self._logger
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()

    @property
    def builder(self) -> AssertionBuilder:
        return self._builder

    @property
    def broker(self) -> AsyncTokenBroker:
        return self._broker

    @property
    def invoker(self) -> AsyncAPIInvoker:
        return self._invoker

    async def acquire_token(self) -> Token:
        """Build a fresh assertion and exchange it for a token."""
        return await self._broker.fetch_token(self._builder)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """One logical request: acquire a token, then one single-target call."""
        token = await self.acquire_token()
        return await self._invoker.call(token, method, path, json_body=json_body, params=params)

    async def download(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> BinaryPayload:
        """One logical request: acquire a token, then one single-target download."""
        token = await self.acquire_token()
        return await self._invoker.call_binary(token, "GET", path, params=params)

    async def probe(
        self,
        method: str,
        path: str,
        *,
        candidates: Sequence[str] | None = None,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """One logical request: acquire a token, then a candidate probe."""
        token = await self.acquire_token()
        return await self._invoker.probe(
            token,
            method,
            path,
            candidates if candidates is not None else self.config.candidate_base_paths or [],
            json_body=json_body,
            params=params,
        )

    async def envelopes(self, token: Token | None = None) -> AsyncEnvelopesAPI:
        """Envelope operations; acquires a token when none is given."""
        account_id = self.config.require_account_id()
        return AsyncEnvelopesAPI(self._invoker, token or await self.acquire_token(), account_id)

    async def documents(self, token: Token | None = None) -> AsyncDocumentsAPI:
        """Document operations over the configured candidate base paths."""
        account_id = self.config.require_account_id()
        return AsyncDocumentsAPI(
            self._invoker,
            token or await self.acquire_token(),
            account_id,
            self.config.candidate_base_paths or [],
        )
