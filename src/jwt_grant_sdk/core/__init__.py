"""Core components for the JWT grant SDK.

Centralized logic shared between the sync and async brokers and invokers.
"""

from __future__ import annotations

from .api_ops import APIOperations
from .candidates import CandidateProbe
from .errors import ErrorFactory
from .http_executor import AsyncHTTPExecutor, SyncHTTPExecutor
from .token_ops import TokenOperations

__all__ = [
    "APIOperations",
    "CandidateProbe",
    "ErrorFactory",
    "TokenOperations",
    "SyncHTTPExecutor",
    "AsyncHTTPExecutor",
]
