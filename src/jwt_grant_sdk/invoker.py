"""Synchronous downstream API invoker.

Performs authenticated calls either against one known target or against an
ordered list of candidate base paths when the authoritative mount point of
an API is not reliably known. Candidates are probed strictly in order, one
at a time; the first 2xx wins and every failure before it is kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .core.api_ops import APIOperations
from .core.candidates import CandidateProbe
from .core.http_executor import SyncHTTPExecutor
from .errors import GrantSDKError, InvalidConfigError
from .http import join_url
from .telemetry import SDKLogger, trace_operation

if TYPE_CHECKING:
    import threading
    from collections.abc import Sequence

    import httpx

    from .models import APIResult, BinaryPayload, Token


class APIInvoker:
    """Issues bearer-authenticated API calls with optional candidate probing."""

    def __init__(
        self,
        client: httpx.Client,
        *,
        base_url: str | None = None,
        logger: Any | None = None,
    ) -> None:
        """Initialize invoker.

        Args:
            client: HTTP client with bounded timeouts.
            base_url: Base for relative single-target paths.
            logger: Optional structlog logger.
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self._logger = SDKLogger.wrap(logger)
        self._executor = SyncHTTPExecutor(client, self._logger)

    def resolve(self, path: str) -> str:
        """Absolute URL for a single-target path."""
        if path.startswith(("https://", "http://")):
            return path
        if self.base_url is None:
            msg = f"Relative path {path!r} needs a base_url"
            raise InvalidConfigError(msg, field="base_url")
        return join_url(self.base_url, path)

    def call(
        self,
        token: Token,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> APIResult:
        """Single-target structured call.

        Args:
            token: Bearer token.
            method: HTTP method.
            path: Absolute URL or path relative to ``base_url``.
            json_body: Optional JSON request body.
            params: Optional query parameters.

        Returns:
            Parsed JSON result.

        Raises:
            HTTPError: Non-2xx response. Never retried.
            TransportError: No response obtained.
            MalformedResponseError: 2xx body is not JSON.
            TokenExpiredError: ``token`` is past its expiry.
        """
        url = self.resolve(path)
        response = self._executor.execute(
            method,
            url,
            **APIOperations.build_request_kwargs(token, json_body=json_body, params=params),
        )
        result = APIOperations.to_json_result(response, url=url)
        self._logger.debug("API call succeeded", method=method, url=url, status_code=result.status_code)
        return result

    def call_binary(
        self,
        token: Token,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> BinaryPayload:
        """Single-target download; upstream content headers pass through unchanged.

        Raises:
            HTTPError: Non-2xx response.
            TransportError: No response obtained.
        """
        url = self.resolve(path)
        response = self._executor.execute(
            method,
            url,
            **APIOperations.build_request_kwargs(
                token, json_body=json_body, params=params, binary=True
            ),
        )
        payload = APIOperations.to_binary_payload(response, url=url)
        self._logger.debug("Download succeeded", method=method, url=url, size=payload.size)
        return payload

    def probe(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> APIResult:
        """Structured call against the first candidate base path that answers 2xx.

        Args:
            token: Bearer token.
            method: HTTP method.
            path: Path relative to each candidate.
            candidates: Ordered candidate base paths.
            json_body: Optional JSON request body.
            params: Optional query parameters.
            cancel_event: When set, remaining candidates are skipped.

        Returns:
            Result of the winning candidate, which is reported in ``candidate``.

        Raises:
            AllCandidatesFailedError: Every candidate failed; carries the history.
            ProbeCancelledError: ``cancel_event`` was set before a success.
            InvalidConfigError: ``candidates`` is empty.
        """
        return self._probe(
            token,
            method,
            path,
            candidates,
            json_body=json_body,
            params=params,
            binary=False,
            cancel_event=cancel_event,
        )

    def probe_binary(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        params: dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BinaryPayload:
        """Download from the first candidate base path that answers 2xx."""
        return self._probe(
            token,
            method,
            path,
            candidates,
            json_body=None,
            params=params,
            binary=True,
            cancel_event=cancel_event,
        )

    def _probe(
        self,
        token: Token,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        json_body: Any,
        params: dict[str, Any] | None,
        binary: bool,
        cancel_event: threading.Event | None,
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
            for candidate, url in probe.attempts():
                if cancel_event is not None and cancel_event.is_set():
                    raise probe.cancelled()
                try:
                    response = self._executor.execute(method, url, **kwargs)
                    result = convert(response, url=url, candidate=candidate)
                except GrantSDKError as e:
                    probe.record_failure(candidate, url, e)
                    continue
                probe.record_success(candidate, result.status_code)
                return result

            raise probe.exhausted()
