"""Authorization Code flow driver.

:class:`OAuth2Engine` performs the parts of the flow that are generic
OAuth2: building the authorization redirect, checking ``state``, and
exchanging the code at the token endpoint.  It then hands the tokens to
the strategy's :class:`CallbackHandler` and reports the result through a
``done(error, user)`` completion callback.

One engine serves exactly one authorization attempt.  Keep it with the
user's session between the redirect and the callback.
"""

from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass
from typing import Callable, TypeVar

import httpx
from loguru import logger
from pydantic import ValidationError

from ..errors import (
    AuthFlowError,
    AuthorizationDenied,
    StateMismatch,
    TokenExchangeError,
)
from ..models.auth import AuthorizedUser, TokenSet, UserProfile
from ..models.outcome import Failure
from .strategy import AuthorizationStrategy

T = TypeVar("T")
DoneCallback = Callable[[Exception | None, AuthorizedUser | None], T]


@dataclass(frozen=True)
class AuthorizationRequest:
    """Where to send the user, and the values that must come back."""

    url: str
    state: str | None
    nonce: str


class OAuth2Engine:
    """Drive one attempt from redirect to completion."""

    def __init__(
        self,
        strategy: AuthorizationStrategy,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.strategy = strategy
        self._transport = transport
        self._timeout = timeout
        self._state: str | None = None

    # ------------------------------------------------------------------
    # Redirect
    # ------------------------------------------------------------------

    def authorization_request(self) -> AuthorizationRequest:
        """Build the URL the user's browser is redirected to."""
        options = self.strategy.options
        params = {
            "response_type": "code",
            "client_id": options.client_id,
            "redirect_uri": options.callback_url,
            "scope": options.scope_separator.join(options.scope.split()),
            "nonce": options.nonce,
        }
        if options.state:
            self._state = secrets.token_urlsafe(24)
            params["state"] = self._state
        url = httpx.URL(options.authorization_url).copy_merge_params(params)
        return AuthorizationRequest(url=str(url), state=self._state, nonce=options.nonce)

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    async def complete(
        self,
        done: DoneCallback,
        *,
        code: str | None = None,
        state: str | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> T:
        """Finish the attempt with the query parameters of the callback URL.

        Every failure, including one raised by the credential store, is
        passed to *done* as its first argument.  On success *done* receives
        ``(None, AuthorizedUser)``.  Returns whatever *done* returns.
        """
        try:
            user = await self._complete(code, state, error, error_description)
        except Exception as exc:
            return done(exc, None)
        return done(None, user)

    async def _complete(
        self,
        code: str | None,
        state: str | None,
        error: str | None,
        error_description: str | None,
    ) -> AuthorizedUser:
        if error:
            raise AuthorizationDenied(error_description or error)
        self._check_state(state)
        if not code:
            raise TokenExchangeError("Callback carried no authorization code")

        tokens = await self.exchange_code(code)
        profile = await self._fetch_profile(tokens.access_token)
        assertion = tokens.id_token or tokens.access_token

        outcome = await self.strategy.verify(
            tokens.access_token,
            tokens.refresh_token,
            tokens.params,
            assertion,
            profile,
        )
        if isinstance(outcome, Failure):
            raise outcome.error
        return outcome.context

    def _check_state(self, state: str | None) -> None:
        if not self.strategy.options.state:
            return
        expected = self._state
        # The issued state is single use.
        self._state = None
        if expected is None or state is None:
            raise StateMismatch("No authorization request is pending for this state")
        if not hmac.compare_digest(expected.encode(), state.encode()):
            raise StateMismatch("State parameter does not match the issued value")

    async def exchange_code(self, code: str) -> TokenSet:
        """Trade *code* for a :class:`TokenSet` at the token endpoint."""
        options = self.strategy.options
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": options.callback_url,
            "client_id": options.client_id,
            "client_secret": options.client_secret.get_secret_value(),
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as http:
                resp = await http.post(
                    options.token_url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                resp.raise_for_status()
                return TokenSet.model_validate(resp.json())
        except httpx.HTTPError as exc:
            logger.error(f"Token exchange failed: {exc}")
            raise TokenExchangeError(f"Token exchange failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise TokenExchangeError(f"Token endpoint returned an invalid body: {exc}") from exc

    async def _fetch_profile(self, access_token: str) -> UserProfile | None:
        profile_func = self.strategy.options.profile_func
        if profile_func is None:
            return None
        try:
            return await profile_func(access_token)
        except AuthFlowError:
            raise
        except Exception as exc:
            raise TokenExchangeError(f"Failed to fetch user profile: {exc}") from exc
