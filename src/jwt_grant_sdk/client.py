"""Synchronous JWT grant client.

Wires assertion building, token exchange and API invocation together. Each
logical request acquires its own fresh token; tokens are never cached on
the client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .assertion import AssertionBuilder
from .broker import TokenBroker
from .documents import DocumentsAPI
from .envelopes import EnvelopesAPI
from .http import create_http_client
from .invoker import APIInvoker
from .telemetry import SDKLogger

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from .assertion import SigningKey
    from .config import GrantConfig
    from .models import APIResult, BinaryPayload, Token


class GrantClient:
    """Synchronous client for JWT bearer grant access to a downstream API."""

    def __init__(
        self,
        config: GrantConfig,
        *,
        signing_key: SigningKey | None = None,
        logger: Any | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: SDK configuration.
            signing_key: Preloaded key; loaded from ``config`` when omitted.
            logger: Optional structlog logger.
            transport: Optional httpx transport override.

        Raises:
            KeyFormatError: If the configured key material is malformed.
        """
        self.config = config
        self._logger = SDKLogger.wrap(logger)
        self._builder = AssertionBuilder(config.identity, signing_key or config.signing_key())
        self._http = create_http_client(config, transport=transport)
        self._broker = TokenBroker(self._http, config.token_endpoint or "", logger=self._logger)
        self._invoker = APIInvoker(self._http, base_url=config.api_base_path, logger=self._logger)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

    @property
    def builder(self) -> AssertionBuilder:
        return self._builder

    @property
    def broker(self) -> TokenBroker:
        return self._broker

    @property
    def invoker(self) -> APIInvoker:
        return self._invoker

    def acquire_token(self) -> Token:
        """Build a fresh assertion and exchange it for a token.

        Raises:
            AuthRejectedError: Token endpoint rejected the assertion.
            MalformedResponseError: Token endpoint answered without a token.
            TransportError: Token endpoint unreachable.
        """
        return self._broker.fetch_token(self._builder)

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """One logical request: acquire a token, then one single-target call."""
        token = self.acquire_token()
        return self._invoker.call(token, method, path, json_body=json_body, params=params)

    def download(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> BinaryPayload:
        """One logical request: acquire a token, then one single-target download."""
        token = self.acquire_token()
        return self._invoker.call_binary(token, "GET", path, params=params)

    def probe(
        self,
        method: str,
        path: str,
        *,
        candidates: Sequence[str] | None = None,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """One logical request: acquire a token, then a candidate probe.

        ``candidates`` defaults to the configured candidate base paths.
        """
        token = self.acquire_token()
        return self._invoker.probe(
            token,
            method,
            path,
            candidates if candidates is not None else self.config.candidate_base_paths or [],
            json_body=json_body,
            params=params,
        )

    def envelopes(self, token: Token | None = None) -> EnvelopesAPI:
        """Envelope operations; acquires a token when none is given."""
        account_id = self.config.require_account_id()
        return EnvelopesAPI(self._invoker, token or self.acquire_token(), account_id)

    def documents(self, token: Token | None = None) -> DocumentsAPI:
        """Document operations over the configured candidate base paths."""
        account_id = self.config.require_account_id()
        return DocumentsAPI(
            self._invoker,
            token or self.acquire_token(),
            account_id,
            self.config.candidate_base_paths or [],
        )
