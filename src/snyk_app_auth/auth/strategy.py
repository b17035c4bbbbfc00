"""Strategy configuration for one authorization attempt.

:class:`StrategyAssembler` is called once per login.  Each call generates
exactly one nonce and threads it into both the options sent to the
authorization server and the :class:`CallbackHandler` that later checks
it, so the two can never disagree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx
from loguru import logger
from pydantic import SecretStr

from ..api.orgs import OrgResolver
from ..api.users import ProfileResolver
from ..config import Configuration
from ..crypto import TokenCipher
from ..models.auth import UserProfile
from ..nonce import NonceManager
from ..storage.records import CredentialStore
from .callback import CallbackHandler

ProfileFunc = Callable[[str], Awaitable[UserProfile]]


@dataclass(frozen=True)
class StrategyOptions:
    """Named options consumed by the OAuth2 engine."""

    authorization_url: str
    token_url: str
    client_id: str
    client_secret: SecretStr
    callback_url: str
    scope: str
    nonce: str
    profile_func: ProfileFunc | None = None
    scope_separator: str = " "
    state: bool = True
    pass_context_to_callback: bool = True


@dataclass(frozen=True)
class AuthorizationStrategy:
    """Options plus the callback that completes the same attempt."""

    options: StrategyOptions
    verify: CallbackHandler

    @property
    def nonce(self) -> str:
        return self.options.nonce


class StrategyAssembler:
    """Build an :class:`AuthorizationStrategy` per authorization attempt.

    The cipher is created once here and shared by every attempt; the
    nonce is never shared.

    Example::

        assembler = StrategyAssembler(settings.to_configuration(), JsonCredentialStore())
        strategy = assembler.build()
    """

    def __init__(
        self,
        config: Configuration,
        store: CredentialStore,
        *,
        cipher: TokenCipher | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        fetch_profile: bool = True,
    ) -> None:
        self.config = config
        self.store = store
        self.cipher = cipher or TokenCipher(config.encryption_secret.get_secret_value())
        self.resolver = OrgResolver(config, transport=transport)
        self.profile_func: ProfileFunc | None = (
            ProfileResolver(config, transport=transport) if fetch_profile else None
        )

    def build(self) -> AuthorizationStrategy:
        nonce = NonceManager.generate()
        options = StrategyOptions(
            authorization_url=self.config.authorization_endpoint,
            token_url=self.config.token_endpoint,
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            callback_url=self.config.callback_url,
            scope=self.config.scope,
            nonce=nonce,
            profile_func=self.profile_func,
        )
        handler = CallbackHandler(
            nonce=nonce,
            resolver=self.resolver,
            cipher=self.cipher,
            store=self.store,
        )
        logger.debug("Assembled strategy for a new authorization attempt")
        return AuthorizationStrategy(options=options, verify=handler)
