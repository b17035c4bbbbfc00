"""Authenticated symmetric encryption for stored secrets.

Tokens are encrypted with Fernet (AES-128-CBC + HMAC-SHA256).  The Fernet
key is derived from the configured encryption secret with PBKDF2, so any
string can serve as the secret.  Tampered ciphertext or a wrong secret
raises :class:`~snyk_app_auth.errors.DecryptionError`; no partially
decrypted value is ever returned.
"""

from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionError, EncryptionError

KDF_SALT = b"snyk-app-auth/token-cipher/v1"
KDF_ITERATIONS = 200_000


def derive_key(secret: str) -> bytes:
    """Derive a urlsafe-base64 Fernet key from *secret*."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=KDF_SALT,
        iterations=KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class TokenCipher:
    """Encrypt and decrypt secret strings with a key held for the cipher's lifetime.

    Example::

        cipher = TokenCipher(settings.encryption_secret.get_secret_value())
        stored = cipher.encrypt(access_token)
        assert cipher.decrypt(stored) == access_token
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise EncryptionError("Encryption secret must not be empty")
        self._fernet = Fernet(derive_key(secret))

    def __repr__(self) -> str:
        return "TokenCipher(<secret>)"

    def encrypt(self, plaintext: str) -> str:
        """Return the ciphertext of *plaintext* as an ASCII string."""
        if not isinstance(plaintext, str):
            raise EncryptionError(
                f"Only strings can be encrypted, got {type(plaintext).__name__}"
            )
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncryptionError("Plaintext is not valid UTF-8 text") from exc
        return self._fernet.encrypt(data).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext of *ciphertext*.

        Raises :class:`DecryptionError` if the ciphertext was produced with a
        different key, was modified, or is not a Fernet token at all.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, AttributeError) as exc:
            raise DecryptionError("Ciphertext could not be authenticated") from exc
