"""Document operations on the document management API.

That API's mount point differs between deployments and is not reliably
documented, so every call goes through the candidate probe. The winning
base path is reported back as ``endpoint_used``.
"""

from __future__ import annotations

import base64
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from .errors import ErrorCode, MalformedResponseError
from .models import DocumentListing, UploadedDocument

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .async_invoker import AsyncAPIInvoker
    from .invoker import APIInvoker
    from .models import APIResult, BinaryPayload, Token

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def documents_path(account_id: str, document_id: str | None = None) -> str:
    path = f"/navigator/v1/accounts/{account_id}/documents"
    if document_id is not None:
        path = f"{path}/{document_id}/content"
    return path


def default_disposition(document_id: str) -> str:
    return f'attachment; filename="document_{document_id}.pdf"'


def upload_body(name: str, content: bytes, file_extension: str | None = None) -> dict[str, str]:
    """JSON body for a document upload.

    Raises:
        ValueError: If the name or content is empty.
    """
    if not name:
        msg = "name is required"
        raise ValueError(msg)
    if not content:
        msg = "content must not be empty"
        raise ValueError(msg)
    extension = file_extension or PurePosixPath(name).suffix.lstrip(".") or "pdf"
    return {
        "name": name,
        "fileExtension": extension,
        "documentBase64": base64.b64encode(content).decode("ascii"),
    }


def _listing(result: APIResult) -> DocumentListing:
    data = result.data if isinstance(result.data, dict) else {}
    return DocumentListing(
        documents=data.get("documents") or [],
        endpoint_used=result.url or "",
    )


def _uploaded(result: APIResult) -> UploadedDocument:
    data = result.data if isinstance(result.data, dict) else {}
    document_id = data.get("documentId")
    if not document_id:
        raise MalformedResponseError(
            "Upload response is missing documentId",
            status_code=result.status_code,
            code=ErrorCode.MALFORMED_API_RESPONSE,
        )
    return UploadedDocument(document_id=str(document_id), endpoint_used=result.url or "")


def _with_default_headers(payload: BinaryPayload, document_id: str) -> BinaryPayload:
    # Upstream values win; defaults only fill gaps.
    return payload.model_copy(
        update={
            "content_type": payload.content_type or DEFAULT_CONTENT_TYPE,
            "content_disposition": payload.content_disposition
            or default_disposition(document_id),
        }
    )


def _require_id(document_id: str) -> str:
    if not document_id:
        msg = "document_id is required"
        raise ValueError(msg)
    return document_id


class DocumentsAPI:
    """Document operations bound to one token, account and candidate list."""

    def __init__(
        self,
        invoker: APIInvoker,
        token: Token,
        account_id: str,
        candidates: Sequence[str],
    ) -> None:
        self._invoker = invoker
        self._token = token
        self.account_id = account_id
        self.candidates = list(candidates)

    def list_documents(self) -> DocumentListing:
        """List documents in the account."""
        result = self._invoker.probe(
            self._token, "GET", documents_path(self.account_id), self.candidates
        )
        return _listing(result)

    def download_document(self, document_id: str) -> BinaryPayload:
        """Download document content with its upstream content headers."""
        payload = self._invoker.probe_binary(
            self._token,
            "GET",
            documents_path(self.account_id, _require_id(document_id)),
            self.candidates,
        )
        return _with_default_headers(payload, document_id)

    def upload_document(
        self,
        name: str,
        content: bytes,
        file_extension: str | None = None,
    ) -> UploadedDocument:
        """Upload a document; the extension defaults to the name's suffix."""
        result = self._invoker.probe(
            self._token,
            "POST",
            documents_path(self.account_id),
            self.candidates,
            json_body=upload_body(name, content, file_extension),
        )
        return _uploaded(result)


class AsyncDocumentsAPI:
    """Async document operations bound to one token, account and candidate list."""

    def __init__(
        self,
        invoker: AsyncAPIInvoker,
        token: Token,
        account_id: str,
        candidates: Sequence[str],
    ) -> None:
        self._invoker = invoker
        self._token = token
        self.account_id = account_id
        self.candidates = list(candidates)

    async def list_documents(self) -> DocumentListing:
        result = await self._invoker.probe(
            self._token, "GET", documents_path(self.account_id), self.candidates
        )
        return _listing(result)

    async def download_document(self, document_id: str) -> BinaryPayload:
        payload = await self._invoker.probe_binary(
            self._token,
            "GET",
            documents_path(self.account_id, _require_id(document_id)),
            self.candidates,
        )
        return _with_default_headers(payload, document_id)

    async def upload_document(
        self,
        name: str,
        content: bytes,
        file_extension: str | None = None,
    ) -> UploadedDocument:
        result = await self._invoker.probe(
            self._token,
            "POST",
            documents_path(self.account_id),
            self.candidates,
            json_body=upload_body(name, content, file_extension),
        )
        return _uploaded(result)
