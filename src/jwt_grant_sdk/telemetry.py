"""OpenTelemetry and structlog integration for the JWT grant SDK.

Provides tracing spans around network calls and structured logging with
redaction of credential-adjacent values.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator, MutableMapping

    from .config import TelemetryConfig

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "assertion",
        "authorization",
        "client_secret",
        "private_key",
        "signing_key",
        "token",
    }
)

_BEARER = re.compile(r"(?i)bearer\s+[A-Za-z0-9\-._~+/]+=*")
_COMPACT_JWT = re.compile(r"\beyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
_PEM_BLOCK = re.compile(r"-----BEGIN[^-]*-----.*?(?:-----END[^-]*-----|$)", re.DOTALL)

# Module-level tracer and logger
_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def redact_text(value: str) -> str:
    """Mask bearer credentials, compact JWTs and PEM blocks inside free text."""
    value = _PEM_BLOCK.sub(REDACTED, value)
    value = _BEARER.sub(f"Bearer {REDACTED}", value)
    return _COMPACT_JWT.sub(REDACTED, value)


def _redact_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS:
        return REDACTED
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return {k: _redact_value(str(k), v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(key, v) for v in value)
    return value


def redact_sensitive(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor that masks key material and token values."""
    for key in list(event_dict):
        event_dict[key] = _redact_value(key, event_dict[key])
    return event_dict


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("jwt-grant-sdk", "0.1.0")
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger("jwt-grant-sdk")
    return _logger


def configure_telemetry(config: TelemetryConfig) -> None:
    """Configure telemetry based on config.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_sensitive,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _logger = structlog.get_logger(config.service_name)

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    _tracer = trace.get_tracer(config.service_name, "0.1.0")


def _log_level_to_int(level: str) -> int:
    """Convert log level string to integer."""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager for tracing an operation.

    Args:
        name: Name of the operation.
        attributes: Optional span attributes.

    Yields:
        The active span.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, redact_text(str(e))))
            span.record_exception(e)
            raise


class SDKLogger:
    """Structured logger that redacts credential values before emitting.

    Wraps any structlog-compatible logger, so callers can inject their own
    bound logger and still get redaction when the global structlog
    configuration does not include ``redact_sensitive``.
    """

    def __init__(self, logger: Any | None = None) -> None:
        self._logger = logger if logger is not None else get_logger()

    @classmethod
    def wrap(cls, logger: Any | None) -> SDKLogger:
        """Return ``logger`` unchanged if already wrapped, else wrap it."""
        if isinstance(logger, SDKLogger):
            return logger
        return cls(logger)

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        clean = {key: _redact_value(key, value) for key, value in kwargs.items()}
        getattr(self._logger, level)(redact_text(message), **clean)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._emit("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._emit("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._emit("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._emit("error", message, **kwargs)

    def bind(self, **kwargs: Any) -> SDKLogger:
        """Create a new logger with bound context."""
        clean = {key: _redact_value(key, value) for key, value in kwargs.items()}
        return SDKLogger(self._logger.bind(**clean))
