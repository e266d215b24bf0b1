"""Asynchronous downstream API invoker.

Same contract as ``APIInvoker``. Candidates are still awaited one after the
other, never fanned out. Cancelling the awaiting task aborts the in-flight
attempt and skips the remaining candidates. The ``asyncio.CancelledError``
keeps propagating, with a ``ProbeCancelledError`` carrying the failures seen
so far attached as its ``__cause__``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from .core.api_ops import APIOperations
from .core.candidates import CandidateProbe
from .core.http_executor import AsyncHTTPExecutor
from .errors import GrantSDKError, InvalidConfigError
from .http import join_url
from .telemetry import SDKLogger, trace_operation

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from .models import APIResult, BinaryPayload, Token


class AsyncAPIInvoker:
    """Async bearer-authenticated API calls with optional candidate probing."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str | None = None,
        logger: Any | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self._logger = SDKLogger.wrap(logger)
        self._executor = AsyncHTTPExecutor(client, self._logger)

    def resolve(self, path: str) -> str:
        """Absolute URL for a single-target path."""
        if path.startswith(("https://", "http://")):
            return path
        if self.base_url is None:
            msg = f"Relative path {path!r} needs a base_url"
            raise InvalidConfigError(msg, field="base_url")
        return join_url(self.base_url, path)

    async def call(
        self,
        token: Token,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """Single-target structured call.

        Raises:
            HTTPError: Non-2xx response. Never retried.
            TransportError: No response obtained.
            MalformedResponseError: 2xx body is not JSON.
            TokenExpiredError: ``token`` is past its expiry.
        """
        url = self.resolve(path)
        response = await self._executor.execute(
            method,
            url,
            **APIOperations.build_request_kwargs(token, json_body=json_body, params=params),
        )
        result = APIOperations.to_json_result(response, url=url)
        self._logger.debug("API call succeeded", method=method, url=url, status_code=result.status_code)
        return result

    async def call_binary(
        self,
        token: Token,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> BinaryPayload:
        """Single-target download; upstream content headers pass through unchanged."""
        url = self.resolve(path)
        response = await self._executor.execute(
            method,
            url,
            **APIOperations.build_request_kwargs(
                token, json_body=json_body, params=params, binary=True
            ),
        )
        payload = APIOperations.to_binary_payload(response, url=url)
        self._logger.debug("Download succeeded", method=method, url=url, size=payload.size)
        return payload

    async def probe(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """Structured call against the first candidate base path that answers 2xx.

        Raises:
            AllCandidatesFailedError: Every candidate failed; carries the history.
            asyncio.CancelledError: The awaiting task was cancelled; its
                ``__cause__`` is a ``ProbeCancelledError`` with the history.
            InvalidConfigError: ``candidates`` is empty.
        """
        return await self._probe(
            token, method, path, candidates, json_body=json_body, params=params, binary=False
        )

    async def probe_binary(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        params: dict[str, Any] | None = None,
    ) -> BinaryPayload:
        """Download from the first candidate base path that answers 2xx."""
        return await self._probe(
            token, method, path, candidates, json_body=None, params=params, binary=True
        )

    async def _probe(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        json_body: Any,
        params: dict[str, Any] | None,
        binary: bool,
    ) -> Any:
        probe = CandidateProbe(method, path, candidates, logger=self._logger)
        kwargs = APIOperations.build_request_kwargs(
            token, json_body=json_body, params=params, binary=binary
        )
        convert = APIOperations.to_binary_payload if binary else APIOperations.to_json_result

        with trace_operation(
            "candidate_probe",
            attributes={"http.method": method, "probe.candidates": len(probe.candidates)},
        ):
            try:
                for candidate, url in probe.attempts():
                    try:
                        response = await self._executor.execute(method, url, **kwargs)
                        result = convert(response, url=url, candidate=candidate)
                    except GrantSDKError as e:
                        probe.record_failure(candidate, url, e)
                        continue
                    probe.record_success(candidate, result.status_code)
                    return result
            except asyncio.CancelledError as e:
                # asyncio.timeout only converts the exact CancelledError it injected
                e.__cause__ = probe.cancelled()
                raise

            raise probe.exhausted()
