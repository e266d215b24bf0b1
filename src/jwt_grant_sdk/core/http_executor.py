"""Centralized HTTP executors for the JWT grant SDK.

Each executor sends exactly one request inside a trace span and translates
httpx transport failures into ``TransportError`` and unparseable URLs into
``InvalidConfigError``. Status codes are left to the caller: the token
broker and the API invoker classify them differently. Nothing is retried
here.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..telemetry import SDKLogger, trace_operation
from .errors import ErrorFactory


class SyncHTTPExecutor:
    """Synchronous single-shot HTTP executor."""

    def __init__(
        self,
        client: httpx.Client,
        logger: Any | None = None,
    ) -> None:
        """Initialize sync HTTP executor.

        Args:
            client: HTTP client.
            logger: Optional structlog logger.
        """
        self._client = client
        self._logger = SDKLogger.wrap(logger)

    @property
    def client(self) -> httpx.Client:
        """Get HTTP client."""
        return self._client

    def execute(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute one HTTP request.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            **kwargs: Additional request arguments.

        Returns:
            HTTP response, whatever its status.

        Raises:
            TransportError: If no response was obtained.
            InvalidConfigError: If the URL cannot be parsed.
        """
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
        ) as span:
            try:
                response = self._client.request(method, url, **kwargs)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                error = ErrorFactory.from_exception(e, url=url)
                self._logger.debug("Request failed", method=method, url=url, error=error.code)
                raise error from e
            span.set_attribute("http.status_code", response.status_code)
            return response


class AsyncHTTPExecutor:
    """Asynchronous single-shot HTTP executor."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: Any | None = None,
    ) -> None:
        """Initialize async HTTP executor.

        Args:
            client: Async HTTP client.
            logger: Optional structlog logger.
        """
        self._client = client
        self._logger = SDKLogger.wrap(logger)

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        return self._client

    async def execute(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute one async HTTP request.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            **kwargs: Additional request arguments.

        Returns:
            HTTP response, whatever its status.

        Raises:
            TransportError: If no response was obtained.
            InvalidConfigError: If the URL cannot be parsed.
        """
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
        ) as span:
            try:
                response = await self._client.request(method, url, **kwargs)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                error = ErrorFactory.from_exception(e, url=url)
                self._logger.debug("Request failed", method=method, url=url, error=error.code)
                raise error from e
            span.set_attribute("http.status_code", response.status_code)
            return response
