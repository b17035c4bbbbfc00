"""Shared fixtures for the authorization flow tests."""
import base64
import json

import pytest
from pydantic import SecretStr

from snyk_app_auth.config import Configuration
from snyk_app_auth.crypto import TokenCipher


def make_jwt(claims: dict) -> str:
    """Build an unsigned JWT carrying *claims*."""
    def _part(obj) -> str:
        raw = json.dumps(obj).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return f"{_part({'alg': 'none', 'typ': 'JWT'})}.{_part(claims)}.sig"


@pytest.fixture
def config() -> Configuration:
    return Configuration(
        client_id="client-123",
        client_secret=SecretStr("client-secret"),
        callback_url="https://app.example.test/callback",
        scope="org.read apps.read",
        encryption_secret=SecretStr("test-encryption-secret"),
        api_base="https://api.example.test",
        app_base="https://app.example.test",
    )


@pytest.fixture(scope="session")
def cipher() -> TokenCipher:
    return TokenCipher("test-encryption-secret")
