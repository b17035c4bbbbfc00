"""Nonce generation and verification for authorization attempts.

A nonce is generated once per attempt, sent with the authorization
request, and echoed back by the platform inside the identity token.  A
callback whose token carries any other nonce is rejected as a possible
replay.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import uuid
from typing import Any

from .errors import AssertionDecodeError, NonceMismatch


def decode_jwt(token: str) -> dict[str, Any]:
    """Decode the payload of a JWT **without** verifying the signature.

    Raises :class:`AssertionDecodeError` if the token cannot be decoded.
    """
    if not isinstance(token, str):
        raise AssertionDecodeError("Identity token is not a string")
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        raise AssertionDecodeError("Identity token is not a three-part JWT")
    payload = parts[1]
    # Pad to a multiple of 4 for base64 decoding.
    payload += "=" * (-len(payload) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (binascii.Error, ValueError) as exc:
        raise AssertionDecodeError(f"Identity token payload is not valid JSON: {exc}") from exc
    if not isinstance(claims, dict):
        raise AssertionDecodeError("Identity token payload is not a JSON object")
    return claims


class NonceManager:
    """Generate and check per-attempt nonces.

    The manager holds no state: every :meth:`generate` call returns a fresh
    UUID4 (122 random bits) and the expected nonce is always passed in by
    the caller that owns the attempt.
    """

    @staticmethod
    def generate() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def claim(assertion: str) -> str:
        """Return the ``nonce`` claim of *assertion*.

        A token without a string ``nonce`` claim counts as undecodable.
        """
        claims = decode_jwt(assertion)
        nonce = claims.get("nonce")
        if not isinstance(nonce, str) or not nonce:
            raise AssertionDecodeError("Identity token carries no nonce claim")
        return nonce

    @classmethod
    def verify(cls, expected: str, assertion: str) -> bool:
        """Check that *assertion* echoes *expected*.

        Returns ``True`` on a match.  Raises :class:`NonceMismatch` when the
        nonces differ and :class:`AssertionDecodeError` when the token cannot
        be decoded; neither case is ever reported as success.
        """
        actual = cls.claim(assertion)
        if not hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8")):
            raise NonceMismatch("Nonce values do not match")
        return True
