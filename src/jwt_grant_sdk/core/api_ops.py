"""Centralized downstream API operations for the JWT grant SDK.

Request building and response interpretation shared by the sync and async
invokers, for both single-target and multi-candidate calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ErrorCode, MalformedResponseError, TokenExpiredError
from ..http import is_success
from ..models import APIResult, BinaryPayload
from .errors import ErrorFactory

if TYPE_CHECKING:
    import httpx

    from ..models import Token


class APIOperations:
    """Stateless helpers shared by sync and async invokers."""

    @staticmethod
    def build_request_kwargs(
        token: Token,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        binary: bool = False,
    ) -> dict[str, Any]:
        """Keyword arguments for ``httpx.Client.request``.

        Args:
            token: Bearer token for the ``Authorization`` header.
            json_body: Optional JSON request body.
            params: Optional query parameters.
            binary: Whether a binary download is expected.

        Returns:
            Request keyword arguments.

        Raises:
            TokenExpiredError: If ``token`` is past its expiry.
        """
        if token.is_expired():
            raise TokenExpiredError()
        kwargs: dict[str, Any] = {
            "headers": {
                "Authorization": token.authorization_header,
                "Accept": "*/*" if binary else "application/json",
            },
        }
        if json_body is not None:
            kwargs["json"] = json_body
        if params:
            kwargs["params"] = params
        return kwargs

    @staticmethod
    def to_json_result(
        response: httpx.Response,
        *,
        url: str,
        candidate: str | None = None,
    ) -> APIResult:
        """Interpret a response to a structured call.

        Raises:
            HTTPError: On any non-2xx status.
            MalformedResponseError: On 2xx whose body is not JSON.
        """
        if not is_success(response.status_code):
            raise ErrorFactory.from_http_response(response, url=url)

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError as e:
                raise MalformedResponseError(
                    f"Response from {url} is not JSON",
                    status_code=response.status_code,
                    code=ErrorCode.MALFORMED_API_RESPONSE,
                ) from e

        return APIResult(
            data=data,
            status_code=response.status_code,
            candidate=candidate,
            url=url,
        )

    @staticmethod
    def to_binary_payload(
        response: httpx.Response,
        *,
        url: str,
        candidate: str | None = None,
    ) -> BinaryPayload:
        """Interpret a response to a download call.

        ``Content-Type`` and ``Content-Disposition`` are kept exactly as the
        upstream sent them, including absence.

        Raises:
            HTTPError: On any non-2xx status.
        """
        if not is_success(response.status_code):
            raise ErrorFactory.from_http_response(response, url=url)

        return BinaryPayload(
            content=response.content,
            content_type=response.headers.get("Content-Type"),
            content_disposition=response.headers.get("Content-Disposition"),
            status_code=response.status_code,
            candidate=candidate,
            url=url,
        )
