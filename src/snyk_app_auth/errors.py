"""Error taxonomy for the authorization flow.

Every failure that can end an authorization attempt is an
:class:`AuthFlowError`.  The callback handler reports these to the OAuth2
engine as a failed outcome; none of them is ever downgraded to a warning.
"""

from __future__ import annotations


class AuthFlowError(Exception):
    """Base class for all errors raised by the authorization flow."""


class AssertionDecodeError(AuthFlowError):
    """Raised when the identity token is malformed or cannot be decoded."""


class NonceMismatch(AuthFlowError):
    """Raised when the identity token's nonce does not match the attempt's nonce.

    Treated as a potential replay or CSRF attack.
    """


class ResolutionError(AuthFlowError):
    """Raised when the organization the App is authorized for cannot be resolved.

    The underlying transport or parsing error is available both as
    ``__cause__`` and as :attr:`cause`.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NoAuthorizedResource(ResolutionError):
    """Raised when the platform reports no organization for the App."""


class EncryptionError(AuthFlowError):
    """Raised when a secret cannot be encrypted."""


class DecryptionError(AuthFlowError):
    """Raised on wrong-key decryption or tampered ciphertext."""


class PersistenceError(AuthFlowError):
    """Raised when a credential record cannot be written."""


class StateMismatch(AuthFlowError):
    """Raised when the ``state`` returned to the callback URL was not issued by us."""


class TokenExchangeError(AuthFlowError):
    """Raised when the authorization code cannot be exchanged for tokens."""


class AuthorizationDenied(AuthFlowError):
    """Raised when the callback URL reports an error instead of a code."""
