"""Envelope operations on the e-signature REST API.

The eSignature API lives at a well-known base path, so these are
single-target calls.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .errors import ErrorCode, MalformedResponseError
from .models import EnvelopeSummary

if TYPE_CHECKING:
    from .async_invoker import AsyncAPIInvoker
    from .invoker import APIInvoker
    from .models import APIResult, Token

DEFAULT_EMAIL_SUBJECT = "Please sign this document"


def envelopes_path(account_id: str, envelope_id: str | None = None) -> str:
    path = f"/v2.1/accounts/{account_id}/envelopes"
    if envelope_id is not None:
        path = f"{path}/{envelope_id}"
    return path


def month_start(today: date | None = None) -> str:
    """First day of the current month, the default listing window."""
    today = today or datetime.now(UTC).date()
    return today.replace(day=1).isoformat()


def build_envelope_definition(
    *,
    signer_email: str,
    signer_name: str,
    document_base64: str,
    document_name: str = "Sample Document",
    file_extension: str = "pdf",
    email_subject: str = DEFAULT_EMAIL_SUBJECT,
    status: str = "sent",
) -> dict[str, Any]:
    """Request body for a single-signer, single-document envelope.

    One sign-here tab is placed on page 1 of the document.

    Raises:
        ValueError: If the signer email or name is missing.
    """
    if not signer_email or not signer_name:
        msg = "signer_email and signer_name are required"
        raise ValueError(msg)
    return {
        "emailSubject": email_subject,
        "documents": [
            {
                "documentBase64": document_base64,
                "name": document_name,
                "fileExtension": file_extension,
                "documentId": "1",
            }
        ],
        "recipients": {
            "signers": [
                {
                    "email": signer_email,
                    "name": signer_name,
                    "recipientId": "1",
                    "routingOrder": "1",
                    "tabs": {
                        "signHereTabs": [
                            {
                                "documentId": "1",
                                "pageNumber": "1",
                                "xPosition": "100",
                                "yPosition": "150",
                            }
                        ]
                    },
                }
            ]
        },
        "status": status,
    }


def _summary(result: APIResult) -> EnvelopeSummary:
    try:
        return EnvelopeSummary.model_validate(result.data)
    except ValidationError as e:
        raise MalformedResponseError(
            "Envelope response is missing envelopeId",
            status_code=result.status_code,
            code=ErrorCode.MALFORMED_API_RESPONSE,
        ) from e


def _summaries(result: APIResult) -> list[EnvelopeSummary]:
    data = result.data if isinstance(result.data, dict) else {}
    envelopes = data.get("envelopes") or []
    try:
        return [EnvelopeSummary.model_validate(item) for item in envelopes]
    except ValidationError as e:
        raise MalformedResponseError(
            "Envelope listing contains an entry without envelopeId",
            status_code=result.status_code,
            code=ErrorCode.MALFORMED_API_RESPONSE,
        ) from e


def _require_id(envelope_id: str) -> str:
    if not envelope_id:
        msg = "envelope_id is required"
        raise ValueError(msg)
    return envelope_id


class EnvelopesAPI:
    """Envelope operations bound to one token and account."""

    def __init__(self, invoker: APIInvoker, token: Token, account_id: str) -> None:
        self._invoker = invoker
        self._token = token
        self.account_id = account_id

    def create_envelope(self, definition: dict[str, Any]) -> EnvelopeSummary:
        """Create (and by default send) an envelope."""
        result = self._invoker.call(
            self._token, "POST", envelopes_path(self.account_id), json_body=definition
        )
        return _summary(result)

    def get_envelope(self, envelope_id: str) -> EnvelopeSummary:
        """Fetch one envelope's status and timestamps."""
        result = self._invoker.call(
            self._token, "GET", envelopes_path(self.account_id, _require_id(envelope_id))
        )
        return _summary(result)

    def list_envelopes(self, from_date: date | str | None = None) -> list[EnvelopeSummary]:
        """List envelopes changed since ``from_date`` (default: start of this month)."""
        if isinstance(from_date, date):
            from_date = from_date.isoformat()
        result = self._invoker.call(
            self._token,
            "GET",
            envelopes_path(self.account_id),
            params={"from_date": from_date or month_start()},
        )
        return _summaries(result)


class AsyncEnvelopesAPI:
    """Async envelope operations bound to one token and account."""

    def __init__(self, invoker: AsyncAPIInvoker, token: Token, account_id: str) -> None:
        self._invoker = invoker
        self._token = token
        self.account_id = account_id

    async def create_envelope(self, definition: dict[str, Any]) -> EnvelopeSummary:
        result = await self._invoker.call(
            self._token, "POST", envelopes_path(self.account_id), json_body=definition
        )
        return _summary(result)

    async def get_envelope(self, envelope_id: str) -> EnvelopeSummary:
        result = await self._invoker.call(
            self._token, "GET", envelopes_path(self.account_id, _require_id(envelope_id))
        )
        return _summary(result)

    async def list_envelopes(
        self, from_date: date | str | None = None
    ) -> list[EnvelopeSummary]:
        if isinstance(from_date, date):
            from_date = from_date.isoformat()
        result = await self._invoker.call(
            self._token,
            "GET",
            envelopes_path(self.account_id),
            params={"from_date": from_date or month_start()},
        )
        return _summaries(result)
