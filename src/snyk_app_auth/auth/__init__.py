"""Authorization flow -- strategy assembly, callback handling, engine."""

from snyk_app_auth.auth.callback import CallbackHandler
from snyk_app_auth.auth.engine import AuthorizationRequest, OAuth2Engine
from snyk_app_auth.auth.strategy import (
    AuthorizationStrategy,
    StrategyAssembler,
    StrategyOptions,
)

__all__ = [
    "AuthorizationRequest",
    "AuthorizationStrategy",
    "CallbackHandler",
    "OAuth2Engine",
    "StrategyAssembler",
    "StrategyOptions",
]
