"""Pydantic v2 models for token sets and stored credentials."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TokenParams(BaseModel):
    """Non-secret parameters returned alongside the tokens by the token endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    expires_in: int
    scope: str = ""
    token_type: str = "bearer"


class TokenSet(TokenParams):
    """Full result of a successful code exchange."""

    access_token: str
    refresh_token: str = ""
    id_token: str | None = None

    @property
    def params(self) -> TokenParams:
        return TokenParams(
            expires_in=self.expires_in,
            scope=self.scope,
            token_type=self.token_type,
        )


class ResourceScope(BaseModel):
    """The organization the App is authorized to act upon."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    orgId: str


class StoredCredentialRecord(BaseModel):
    """One completed installation of the App.

    ``access_token`` and ``refresh_token`` hold ciphertext only.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: datetime
    userId: str | None = None
    orgId: str
    access_token: str
    refresh_token: str
    expires_in: int
    scope: str
    token_type: str
    nonce: str


class UserProfile(BaseModel):
    """Minimal profile used as the identity subject of an install."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    username: str | None = None
    email: str | None = None


class AuthorizedUser(BaseModel):
    """Continuation context handed back to the engine on success."""

    model_config = ConfigDict(frozen=True)

    nonce: str
    userId: str | None = None
