"""Tests for the OAuth2 engine: redirect, state check, code exchange."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from conftest import make_jwt
from snyk_app_auth.auth.engine import OAuth2Engine
from snyk_app_auth.auth.strategy import StrategyAssembler
from snyk_app_auth.errors import (
    AuthorizationDenied,
    NonceMismatch,
    PersistenceError,
    ResolutionError,
    StateMismatch,
    TokenExchangeError,
)
from snyk_app_auth.models import AuthorizedUser


class FakePlatform:
    """Routes token, profile and org requests like the real platform."""

    def __init__(self):
        self.nonce = None
        self.token_status = 200
        self.orgs_status = 200
        self.profile_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/oauth2/token":
            return httpx.Response(
                self.token_status,
                json={
                    "access_token": make_jwt({"nonce": self.nonce, "sub": "sub-1"}),
                    "refresh_token": "refresh-1",
                    "expires_in": 3600,
                    "scope": "org.read",
                    "token_type": "bearer",
                },
            )
        if path == "/v1/user/me":
            return httpx.Response(self.profile_status, json={"id": "user-1"})
        if path == "/v3/apps/client-123/orgs":
            return httpx.Response(self.orgs_status, json={"data": [{"id": "org-1"}]})
        return httpx.Response(404)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def store():
    return MagicMock(insert=AsyncMock())


@pytest.fixture
def engine(config, cipher, platform, store):
    transport = platform.transport
    strategy = StrategyAssembler(config, store, cipher=cipher, transport=transport).build()
    platform.nonce = strategy.nonce
    return OAuth2Engine(strategy, transport=transport)


def _complete(engine, **kwargs):
    results = []

    def done(error, user):
        results.append((error, user))
        return "done-called"

    returned = asyncio.run(engine.complete(done, **kwargs))
    assert returned == "done-called"
    assert len(results) == 1
    return results[0]


class TestAuthorizationRequest:
    def test_url_parameters(self, engine):
        request = engine.authorization_request()
        url = httpx.URL(request.url)
        assert url.host == "app.example.test"
        assert url.path == "/oauth2/authorize"
        assert url.params["version"] == "2021-08-11~experimental"
        assert url.params["response_type"] == "code"
        assert url.params["client_id"] == "client-123"
        assert url.params["redirect_uri"] == "https://app.example.test/callback"
        assert url.params["scope"] == "org.read apps.read"
        assert url.params["nonce"] == engine.strategy.nonce
        assert url.params["state"] == request.state
        assert request.nonce == engine.strategy.nonce

    def test_secret_not_in_url(self, engine):
        assert "client-secret" not in engine.authorization_request().url


class TestComplete:
    def test_happy_path(self, engine, store, platform):
        request = engine.authorization_request()
        error, user = _complete(engine, code="code-1", state=request.state)

        assert error is None
        assert user == AuthorizedUser(nonce=engine.strategy.nonce, userId="user-1")
        store.insert.assert_awaited_once()
        record = store.insert.await_args.args[0]
        assert record.orgId == "org-1"
        assert record.refresh_token != "refresh-1"

        token_request = platform.requests[0]
        body = dict(httpx.QueryParams(token_request.content.decode()))
        assert body["grant_type"] == "authorization_code"
        assert body["code"] == "code-1"
        assert body["client_secret"] == "client-secret"

    def test_state_mismatch(self, engine, store, platform):
        engine.authorization_request()
        error, user = _complete(engine, code="code-1", state="forged")
        assert isinstance(error, StateMismatch)
        assert user is None
        assert platform.requests == []
        store.insert.assert_not_called()

    def test_state_is_single_use(self, engine, store):
        request = engine.authorization_request()
        _complete(engine, code="code-1", state=request.state)
        error, _ = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, StateMismatch)
        store.insert.assert_awaited_once()

    def test_callback_without_request(self, engine):
        error, _ = _complete(engine, code="code-1", state="anything")
        assert isinstance(error, StateMismatch)

    def test_denied(self, engine):
        engine.authorization_request()
        error, _ = _complete(engine, error="access_denied", error_description="User said no")
        assert isinstance(error, AuthorizationDenied)
        assert str(error) == "User said no"

    def test_missing_code(self, engine):
        request = engine.authorization_request()
        error, _ = _complete(engine, state=request.state)
        assert isinstance(error, TokenExchangeError)

    def test_token_endpoint_failure(self, engine, platform, store):
        platform.token_status = 400
        request = engine.authorization_request()
        error, _ = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, TokenExchangeError)
        store.insert.assert_not_called()

    def test_profile_failure(self, engine, platform, store):
        platform.profile_status = 500
        request = engine.authorization_request()
        error, _ = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, TokenExchangeError)
        store.insert.assert_not_called()

    def test_nonce_mismatch_reported(self, engine, platform, store):
        platform.nonce = "someone-elses-nonce"
        request = engine.authorization_request()
        error, user = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, NonceMismatch)
        assert user is None
        store.insert.assert_not_called()

    def test_resolver_failure_reported(self, engine, platform, store):
        platform.orgs_status = 500
        request = engine.authorization_request()
        error, _ = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, ResolutionError)
        store.insert.assert_not_called()

    def test_persistence_failure_reported(self, engine, store):
        store.insert.side_effect = PersistenceError("disk full")
        request = engine.authorization_request()
        error, user = _complete(engine, code="code-1", state=request.state)
        assert isinstance(error, PersistenceError)
        assert user is None
