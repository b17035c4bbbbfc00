"""Server-side OAuth2 Authorization Code flow for platform Apps."""

from snyk_app_auth.auth import OAuth2Engine, StrategyAssembler
from snyk_app_auth.config import Configuration, Settings
from snyk_app_auth.crypto import TokenCipher
from snyk_app_auth.storage import JsonCredentialStore

__version__ = "0.1.0"

__all__ = [
    "Configuration",
    "JsonCredentialStore",
    "OAuth2Engine",
    "Settings",
    "StrategyAssembler",
    "TokenCipher",
]
