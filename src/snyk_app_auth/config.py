"""Process configuration.

:class:`Settings` reads the environment once at process start.  Business
logic only ever sees the immutable :class:`Configuration` built from it,
so components can be constructed with fake values in tests.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_VERSION = "2021-08-11~experimental"


class APIVersion(str, Enum):
    """Platform API generations, each served from its own base URL."""

    V1 = "v1"
    V3 = "v3"


class Configuration(BaseModel):
    """Endpoints and client credentials for one App."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    callback_url: str
    scope: str
    encryption_secret: SecretStr
    api_base: str = "https://api.snyk.io"
    app_base: str = "https://app.snyk.io"
    auth_path: str = "/oauth2/authorize"
    token_path: str = "/oauth2/token"
    api_version: str = DEFAULT_API_VERSION

    @property
    def authorization_endpoint(self) -> str:
        return f"{self.app_base}{self.auth_path}?version={self.api_version}"

    @property
    def token_endpoint(self) -> str:
        return f"{self.api_base}{self.token_path}"

    def base_url(self, version: APIVersion) -> str:
        """Return the API root for *version*."""
        if version is APIVersion.V1:
            return f"{self.api_base}/v1"
        return f"{self.api_base}/v3"


class Settings(BaseSettings):
    """Settings loaded from environment variables (or a ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    client_id: str
    client_secret: SecretStr
    redirect_uri: str
    scopes: str
    encryption_secret: SecretStr

    api_base: str = "https://api.snyk.io"
    app_base: str = "https://app.snyk.io"
    auth_path: str = "/oauth2/authorize"
    token_path: str = "/oauth2/token"
    api_version: str = DEFAULT_API_VERSION

    data_dir: Path | None = None

    def to_configuration(self) -> Configuration:
        return Configuration(
            client_id=self.client_id,
            client_secret=self.client_secret,
            callback_url=self.redirect_uri,
            scope=self.scopes,
            encryption_secret=self.encryption_secret,
            api_base=self.api_base.rstrip("/"),
            app_base=self.app_base.rstrip("/"),
            auth_path=self.auth_path,
            token_path=self.token_path,
            api_version=self.api_version,
        )
