"""Storage layer -- install records and file paths."""

from snyk_app_auth.storage.records import (
    CredentialStore,
    JsonCredentialStore,
    decrypt_record_tokens,
)

__all__ = ["CredentialStore", "JsonCredentialStore", "decrypt_record_tokens"]
