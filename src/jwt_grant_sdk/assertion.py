"""JWT bearer assertion construction.

Builds the compact ``header.claims.signature`` assertion presented to the
authorization server. Construction is a pure function of the service
identity, the signing key and the issue timestamp: no network, disk or
shared state is touched, so a builder can be shared freely between threads
and tasks.
"""

from __future__ import annotations

import base64
import binascii
import re
import time
from typing import TYPE_CHECKING, Any, Callable

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import KeyFormatError
from .models import AssertionClaims, ServiceIdentity

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import (
        RSAPrivateKey,
        RSAPublicKey,
    )

ALGORITHM = "RS256"

_PEM_MARKER = re.compile(r"-----(?:BEGIN|END)[^-]*-----")


def normalize_key_material(material: str) -> str:
    """Undo the quoting and ``\\n`` escaping keys pick up in env files."""
    text = material.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    return text.replace("\\n", "\n")


def decode_key_body(material: str) -> bytes:
    """Strip the PEM envelope and whitespace and base64-decode the body.

    Args:
        material: PEM text, or a bare base64 DER body.

    Returns:
        Raw DER bytes.

    Raises:
        KeyFormatError: If nothing is left to decode or the body is not base64.
    """
    body = _PEM_MARKER.sub("", normalize_key_material(material))
    body = "".join(body.split())
    if not body:
        raise KeyFormatError("Signing key material is empty")
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError("Signing key body is not valid base64") from e


class SigningKey:
    """RSA private key used to sign assertions.

    The key material is never exposed through ``repr`` or ``str``.
    """

    algorithm = ALGORITHM

    def __init__(self, private_key: RSAPrivateKey) -> None:
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise KeyFormatError("Signing key is not an RSA private key")
        self._private_key = private_key

    @classmethod
    def from_der(cls, der: bytes) -> SigningKey:
        """Import a PKCS#8 or PKCS#1 DER encoded RSA private key."""
        try:
            private_key = serialization.load_der_private_key(der, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyFormatError("Signing key could not be imported") from e
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise KeyFormatError("Signing key is not an RSA private key")
        return cls(private_key)

    @classmethod
    def from_pem(cls, material: str) -> SigningKey:
        """Load a key from PEM text as found in configuration or secret storage."""
        return cls.from_der(decode_key_body(material))

    @property
    def private_key(self) -> RSAPrivateKey:
        return self._private_key

    @property
    def public_key(self) -> RSAPublicKey:
        return self._private_key.public_key()

    @property
    def key_size(self) -> int:
        return self._private_key.key_size

    def sign(self, data: bytes) -> bytes:
        """RSASSA-PKCS1-v1_5 / SHA-256 signature over ``data``."""
        return self._private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())

    def __repr__(self) -> str:
        return f"SigningKey(algorithm={self.algorithm!r}, key_size={self.key_size})"

    __str__ = __repr__


def build_claims(identity: ServiceIdentity, issued_at: int) -> AssertionClaims:
    """Claim set for ``identity`` with the fixed one hour lifetime."""
    return AssertionClaims.for_identity(identity, issued_at)


def build_assertion(
    identity: ServiceIdentity,
    signing_key: SigningKey,
    issued_at: int,
) -> str:
    """Build a signed compact assertion.

    Header and claims are serialized as compact JSON, base64url encoded
    without padding and signed with RS256. For a fixed timestamp the output
    is byte-identical across calls.

    Args:
        identity: Service identity supplying ``iss``, ``sub``, ``aud`` and ``scope``.
        signing_key: RSA signing key.
        issued_at: ``iat`` claim as a Unix timestamp.

    Returns:
        ``<header>.<claims>.<signature>``.
    """
    claims = build_claims(identity, issued_at)
    return jwt.encode(
        claims.to_payload(),
        signing_key.private_key,
        algorithm=ALGORITHM,
        headers={"typ": "JWT"},
    )


def decode_segments(assertion: str) -> tuple[dict[str, Any], dict[str, Any], bytes]:
    """Split an assertion into header, claims and raw signature without verifying it."""
    header = jwt.get_unverified_header(assertion)
    claims = jwt.decode(assertion, options={"verify_signature": False})
    signature = assertion.rsplit(".", 1)[-1]
    padded = signature + "=" * (-len(signature) % 4)
    return header, claims, base64.urlsafe_b64decode(padded)


class AssertionBuilder:
    """Builds fresh assertions for a fixed identity and key."""

    def __init__(
        self,
        identity: ServiceIdentity,
        signing_key: SigningKey,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.identity = identity
        self.signing_key = signing_key
        self._clock = clock

    def build(self, issued_at: int | None = None) -> str:
        """Build an assertion issued at ``issued_at`` (defaults to now)."""
        if issued_at is None:
            issued_at = int(self._clock())
        return build_assertion(self.identity, self.signing_key, issued_at)

    def claims(self, issued_at: int | None = None) -> AssertionClaims:
        """Claims the next ``build`` would carry, for logging and diagnostics."""
        if issued_at is None:
            issued_at = int(self._clock())
        return build_claims(self.identity, issued_at)
