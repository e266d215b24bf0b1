"""
Shared test fixtures for JWT grant SDK tests.

Provides common fixtures for key material, configuration and
HTTP stubbing.
"""

import pytest
from unittest.mock import MagicMock

from jwt_grant_sdk.assertion import SigningKey
from jwt_grant_sdk.config import GrantConfig
from jwt_grant_sdk.models import ServiceIdentity, Token

import grant_helpers as helpers


@pytest.fixture(scope="session")
def rsa_key():
    """Provide the session RSA private key."""
    return helpers.rsa_private_key()


@pytest.fixture(scope="session")
def signing_key() -> SigningKey:
    """Provide a signing key over the session RSA key."""
    return helpers.signing_key()


@pytest.fixture(scope="session")
def pkcs8_pem() -> str:
    """Provide the session key as PKCS#8 PEM."""
    return helpers.pkcs8_pem()


@pytest.fixture(scope="session")
def pkcs1_pem() -> str:
    """Provide the session key as PKCS#1 PEM."""
    return helpers.pkcs1_pem()


@pytest.fixture
def identity() -> ServiceIdentity:
    """Provide a service identity."""
    return helpers.identity()


@pytest.fixture
def grant_config() -> GrantConfig:
    """Provide a basic SDK configuration for testing."""
    return helpers.make_config()


@pytest.fixture
def token() -> Token:
    """Provide a bearer token."""
    return helpers.make_token()


@pytest.fixture
def stub() -> helpers.StubServer:
    """Provide an empty stub server; tests add routes."""
    return helpers.StubServer()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Provide a mock structlog logger whose bind returns itself."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def sample_token_response() -> dict:
    """Provide a sample token endpoint response."""
    return {
        "access_token": "eyJ0eXAiOiJNVCIsImFsZyI6IlJTMjU2In0.eyJ2ZXIiOjF9.c2ln",
        "token_type": "Bearer",
        "expires_in": 3600,
        "scope": "signature impersonation",
    }
