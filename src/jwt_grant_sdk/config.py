"""Configuration for the JWT grant SDK.

Uses Pydantic v2 for validation. Identity, key material and endpoints are
supplied by the surrounding application (environment or secret storage).
"""

from __future__ import annotations

import os
from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .assertion import SigningKey
from .errors import InvalidConfigError
from .models import ServiceIdentity

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
DEFAULT_SCOPES = ("signature", "impersonation")


def derive_candidates(
    api_base_path: str,
    fallback_base_paths: list[str] | tuple[str, ...] = (),
) -> list[str]:
    """Ordered candidate base paths for an API whose mount point is uncertain.

    The configured base path comes first, then the same host without its
    ``/restapi`` suffix, then any explicit fallbacks. Duplicates are dropped
    keeping the first occurrence.
    """
    base = api_base_path.rstrip("/")
    ordered = [base]
    if base.endswith("/restapi"):
        ordered.append(base[: -len("/restapi")])
    ordered.extend(path.rstrip("/") for path in fallback_base_paths)

    seen: set[str] = set()
    candidates: list[str] = []
    for candidate in ordered:
        if candidate and candidate not in seen:
            seen.add(candidate)
            candidates.append(candidate)
    return candidates


class TelemetryConfig(BaseModel):
    """OpenTelemetry and logging configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "jwt-grant-sdk"
    log_level: str = "INFO"


class GrantConfig(BaseModel):
    """Main configuration for the JWT grant SDK."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Service identity
    issuer: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    audience: str = Field(..., min_length=1)
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))

    # Key material
    private_key: SecretStr

    # Endpoints
    token_endpoint: str | None = None
    api_base_path: str = Field(..., min_length=1)
    account_id: str | None = None
    candidate_base_paths: list[str] | None = None
    fallback_base_paths: list[str] = Field(default_factory=list)

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @field_validator("api_base_path")
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        """Require an absolute http(s) base path."""
        if not v.startswith(("https://", "http://")):
            msg = f"api_base_path must be an absolute http(s) URL: {v}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("candidate_base_paths", "fallback_base_paths")
    @classmethod
    def validate_path_list(cls, v: list[str] | None) -> list[str] | None:
        """Require every candidate and fallback to be an absolute http(s) URL."""
        if v is None:
            return v
        for path in v:
            if not path.startswith(("https://", "http://")):
                msg = f"base paths must be absolute http(s) URLs: {path}"
                raise ValueError(msg)
        return [path.rstrip("/") for path in v]

    @model_validator(mode="after")
    def set_default_endpoints(self) -> Self:
        """Derive token endpoint and candidate list when not set explicitly."""
        # Use object.__setattr__ since model is frozen
        if self.token_endpoint is None:
            object.__setattr__(self, "token_endpoint", f"https://{self.audience}/oauth/token")
        if self.candidate_base_paths is None:
            object.__setattr__(
                self,
                "candidate_base_paths",
                derive_candidates(self.api_base_path, self.fallback_base_paths),
            )
        elif not self.candidate_base_paths:
            msg = "candidate_base_paths must not be empty"
            raise ValueError(msg)
        return self

    @property
    def scope_string(self) -> str:
        """Get scopes as space-separated string."""
        return " ".join(self.scopes)

    @property
    def identity(self) -> ServiceIdentity:
        """Service identity used for assertions."""
        return ServiceIdentity(
            issuer=self.issuer,
            subject=self.subject,
            audience=self.audience,
            scope=self.scope_string,
        )

    def signing_key(self) -> SigningKey:
        """Load the configured private key.

        Raises:
            KeyFormatError: If the key material is malformed.
        """
        return SigningKey.from_pem(self.private_key.get_secret_value())

    def require_account_id(self) -> str:
        """Account id for account scoped API paths."""
        if not self.account_id:
            raise InvalidConfigError("account_id is required", field="account_id")
        return self.account_id

    @classmethod
    def from_env(cls, prefix: str = "JWT_GRANT_") -> Self:
        """Create config from environment variables.

        Raises:
            InvalidConfigError: If a required variable is missing or invalid.
        """

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        values: dict[str, Any] = {}
        for key in ("ISSUER", "SUBJECT", "AUDIENCE", "PRIVATE_KEY", "API_BASE_PATH"):
            value = get_env(key)
            if not value:
                msg = f"{prefix}{key} environment variable is required"
                raise InvalidConfigError(msg, field=key.lower())
            values[key.lower()] = value

        scopes_str = get_env("SCOPES")
        if scopes_str:
            values["scopes"] = scopes_str.split()
        fallbacks = get_env("FALLBACK_BASE_PATHS")
        if fallbacks:
            values["fallback_base_paths"] = fallbacks.replace(",", " ").split()
        for key in ("TOKEN_ENDPOINT", "ACCOUNT_ID"):
            value = get_env(key)
            if value:
                values[key.lower()] = value

        try:
            values["timeout"] = float(get_env("TIMEOUT", "30.0"))
            return cls(**values)
        except (ValueError, ValidationError) as e:
            raise InvalidConfigError(f"Invalid configuration: {e}") from e
