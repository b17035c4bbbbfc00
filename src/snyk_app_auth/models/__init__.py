"""Re-export data models for convenient access."""

from snyk_app_auth.models.auth import (
    AuthorizedUser,
    ResourceScope,
    StoredCredentialRecord,
    TokenParams,
    TokenSet,
    UserProfile,
)
from snyk_app_auth.models.outcome import Failure, Outcome, Success

__all__ = [
    # Token and credential models
    "AuthorizedUser",
    "ResourceScope",
    "StoredCredentialRecord",
    "TokenParams",
    "TokenSet",
    "UserProfile",
    # Outcome
    "Failure",
    "Outcome",
    "Success",
]
