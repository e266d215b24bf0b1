"""HTTP client utilities for the JWT grant SDK.

Every client carries a bounded timeout so a hung endpoint is reported as a
transport failure instead of stalling a logical request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .config import GrantConfig

USER_AGENT = "jwt-grant-sdk/0.1.0 Python"


def build_timeout(config: GrantConfig) -> httpx.Timeout:
    """Timeout limits for one request."""
    return httpx.Timeout(
        connect=config.connect_timeout,
        read=config.timeout,
        write=config.timeout,
        pool=config.timeout,
    )


def create_http_client(
    config: GrantConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create configured sync HTTP client.

    No ``base_url`` is set: token endpoint and API candidates may live on
    different hosts, so callers always pass absolute URLs.

    Args:
        config: SDK configuration.
        transport: Optional transport override.

    Returns:
        Configured httpx.Client.
    """
    return httpx.Client(
        timeout=build_timeout(config),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
        transport=transport,
    )


def create_async_http_client(
    config: GrantConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.
        transport: Optional transport override.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        timeout=build_timeout(config),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=False,
        transport=transport,
    )


def join_url(base: str, path: str) -> str:
    """Join a base path and a relative path; absolute paths pass through."""
    if path.startswith(("https://", "http://")):
        return path
    if not path:
        return base
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def is_success(status_code: int) -> bool:
    """True for 2xx statuses."""
    return 200 <= status_code < 300
