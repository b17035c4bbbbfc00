"""Token-exchange callback handler.

Runs once per authorization attempt, after the OAuth2 engine has traded
the authorization code for tokens.  The steps are strictly sequential and
the first failure ends the attempt:

1. decode the identity token
2. verify its nonce against the attempt's nonce
3. resolve the organization the App was installed into
4. encrypt the access and refresh tokens
5. hand the finished record to the credential store

Steps 1-4 report failures as a :class:`~snyk_app_auth.models.Failure`.
Errors raised by the store in step 5 propagate to the caller unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from loguru import logger

from ..crypto import TokenCipher
from ..errors import AuthFlowError, EncryptionError
from ..models.auth import (
    AuthorizedUser,
    ResourceScope,
    StoredCredentialRecord,
    TokenParams,
    UserProfile,
)
from ..models.outcome import Failure, Outcome, Success
from ..nonce import NonceManager, decode_jwt
from ..storage.records import CredentialStore


class ScopeResolver(Protocol):
    async def resolve(self, token_type: str, access_token: str) -> ResourceScope: ...


class CallbackHandler:
    """Complete one authorization attempt.

    Parameters
    ----------
    nonce:
        The nonce sent with this attempt's authorization request.  It is
        held here and nowhere else.
    resolver:
        Resolves the organization for the new access token.
    cipher:
        Encrypts tokens before they reach *store*.
    store:
        Receives the finished :class:`StoredCredentialRecord`.
    """

    def __init__(
        self,
        nonce: str,
        resolver: ScopeResolver,
        cipher: TokenCipher,
        store: CredentialStore,
    ) -> None:
        self._nonce = nonce
        self._resolver = resolver
        self._cipher = cipher
        self._store = store

    @property
    def nonce(self) -> str:
        return self._nonce

    def __repr__(self) -> str:
        return f"CallbackHandler(nonce={self._nonce!r})"

    async def __call__(
        self,
        access_token: str,
        refresh_token: str,
        params: TokenParams,
        assertion: str,
        profile: UserProfile | None = None,
    ) -> Outcome:
        """Run the attempt to completion and return its :data:`Outcome`.

        *assertion* is the identity token carrying the ``nonce`` claim.
        *profile*, when the engine fetched one, supplies the user id;
        otherwise the token's ``sub`` claim is used.
        """
        try:
            logger.debug("Decoding identity token")
            claims = decode_jwt(assertion)

            logger.debug("Verifying nonce")
            NonceManager.verify(self._nonce, assertion)

            logger.debug("Resolving organization")
            scope = await self._resolver.resolve(params.token_type, access_token)

            logger.debug("Encrypting tokens")
            encrypted_access, encrypted_refresh = self._encrypt_pair(
                access_token, refresh_token
            )
        except AuthFlowError as exc:
            logger.warning(f"Authorization rejected ({type(exc).__name__}): {exc}")
            return Failure(exc)

        user_id = profile.id if profile is not None else _subject(claims)
        record = StoredCredentialRecord(
            date=datetime.now(timezone.utc),
            userId=user_id,
            orgId=scope.orgId,
            access_token=encrypted_access,
            refresh_token=encrypted_refresh,
            expires_in=params.expires_in,
            scope=params.scope,
            token_type=params.token_type,
            nonce=self._nonce,
        )

        logger.debug("Persisting install record")
        await self._store.insert(record)

        logger.info(f"App installed for user {user_id} in org {scope.orgId}")
        return Success(AuthorizedUser(nonce=self._nonce, userId=user_id))

    def _encrypt_pair(self, access_token: str, refresh_token: str) -> tuple[str, str]:
        try:
            return self._cipher.encrypt(access_token), self._cipher.encrypt(refresh_token)
        except EncryptionError:
            raise
        except Exception as exc:
            raise EncryptionError(f"Token encryption failed: {exc}") from exc


def _subject(claims: dict) -> str | None:
    sub = claims.get("sub")
    return str(sub) if sub is not None else None
