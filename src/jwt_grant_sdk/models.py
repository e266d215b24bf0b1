"""Pydantic models for the JWT grant SDK.

Uses Pydantic v2 frozen models for immutability. Token values are excluded
from ``repr()`` so they never leak through logging of model instances.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorCode

# Fixed assertion lifetime in seconds.
ASSERTION_LIFETIME = 3600


class ServiceIdentity(BaseModel):
    """Who is requesting access and on whose behalf."""

    model_config = ConfigDict(frozen=True)

    issuer: str = Field(..., min_length=1, description="Integration / client id")
    subject: str = Field(..., min_length=1, description="Impersonated user id")
    audience: str = Field(..., min_length=1, description="Authorization server host")
    scope: str = Field(default="", description="Space separated scopes")

    @property
    def scopes(self) -> list[str]:
        """Get scopes as list."""
        return self.scope.split()


class AssertionClaims(BaseModel):
    """Claim set carried by a JWT bearer assertion."""

    model_config = ConfigDict(frozen=True)

    iss: str
    sub: str
    aud: str
    iat: int
    exp: int
    scope: str

    @classmethod
    def for_identity(cls, identity: ServiceIdentity, issued_at: int) -> Self:
        """Build claims for ``identity`` issued at ``issued_at``."""
        return cls(
            iss=identity.issuer,
            sub=identity.subject,
            aud=identity.audience,
            iat=issued_at,
            exp=issued_at + ASSERTION_LIFETIME,
            scope=identity.scope,
        )

    def to_payload(self) -> dict[str, Any]:
        """Claims in wire order."""
        return {
            "iss": self.iss,
            "sub": self.sub,
            "aud": self.aud,
            "iat": self.iat,
            "exp": self.exp,
            "scope": self.scope,
        }


class TokenResponse(BaseModel):
    """OAuth 2.0 token response from the authorization server."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(..., min_length=1, repr=False)
    token_type: str | None = None
    expires_in: int | None = Field(default=None, ge=0)
    scope: str | None = None


class Token(BaseModel):
    """Bearer token scoped to one logical request."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1, repr=False)
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    scope: str | None = None

    @classmethod
    def from_response(
        cls,
        response: TokenResponse,
        *,
        received_at: datetime | None = None,
    ) -> Self:
        """Create Token from TokenResponse with expiration calculation.

        An ``expires_in`` of zero carries no lifetime and is treated as absent.
        """
        expires_at = None
        if response.expires_in:
            expires_at = (received_at or datetime.now(UTC)) + timedelta(
                seconds=response.expires_in
            )
        return cls(
            access_token=response.access_token,
            token_type=response.token_type or "Bearer",
            expires_at=expires_at,
            scope=response.scope,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if token is past its expiry. Tokens without expiry never expire locally."""
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    @property
    def authorization_header(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"Bearer {self.access_token}"


class APIResult(BaseModel):
    """Parsed JSON result of a downstream API call."""

    model_config = ConfigDict(frozen=True)

    data: Any = None
    status_code: int
    candidate: str | None = Field(
        default=None, description="Winning candidate base path (multi-candidate calls)"
    )
    url: str | None = None


class BinaryPayload(BaseModel):
    """Raw bytes of a download plus the upstream headers that describe them."""

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., repr=False)
    content_type: str | None = None
    content_disposition: str | None = None
    status_code: int
    candidate: str | None = None
    url: str | None = None

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.content)

    def headers(self) -> dict[str, str]:
        """Pass-through headers for serving the payload unchanged."""
        headers: dict[str, str] = {}
        if self.content_type is not None:
            headers["Content-Type"] = self.content_type
        if self.content_disposition is not None:
            headers["Content-Disposition"] = self.content_disposition
        return headers


class CandidateFailure(BaseModel):
    """One failed attempt against a candidate base path."""

    model_config = ConfigDict(frozen=True)

    candidate: str
    url: str
    kind: ErrorCode
    status_code: int | None = None
    detail: str = ""

    def describe(self) -> str:
        """Short human readable form used in aggregated error messages."""
        label = str(self.status_code) if self.status_code is not None else self.kind.value
        return f"{label}: {self.detail}" if self.detail else label


class EnvelopeSummary(BaseModel):
    """Envelope fields surfaced by envelope operations."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    envelope_id: str = Field(..., alias="envelopeId")
    status: str | None = None
    email_subject: str | None = Field(default=None, alias="emailSubject")
    created_date_time: str | None = Field(default=None, alias="createdDateTime")
    sent_date_time: str | None = Field(default=None, alias="sentDateTime")
    completed_date_time: str | None = Field(default=None, alias="completedDateTime")
    status_changed_date_time: str | None = Field(
        default=None, alias="statusChangedDateTime"
    )


class DocumentListing(BaseModel):
    """Documents returned by a list call and the endpoint that served them."""

    model_config = ConfigDict(frozen=True)

    documents: list[dict[str, Any]] = Field(default_factory=list)
    endpoint_used: str

    @property
    def count(self) -> int:
        """Number of documents."""
        return len(self.documents)


class UploadedDocument(BaseModel):
    """Result of a document upload."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    endpoint_used: str
