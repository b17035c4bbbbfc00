"""User profile lookup.

The profile is only used to identify who installed the App.  It is
fetched from the v1 API and is unrelated to organization resolution.
"""

from __future__ import annotations

import httpx

from ..config import APIVersion, Configuration
from ..models.auth import UserProfile
from .client import PlatformClient


class ProfileResolver:
    """Callable that fetches ``/user/me`` for a bearer token."""

    def __init__(
        self,
        config: Configuration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    async def __call__(self, access_token: str) -> UserProfile:
        """Fetch the profile of the user who owns *access_token*.

        Raises :class:`httpx.HTTPStatusError` on non-2xx responses.
        """
        async with PlatformClient(
            self.config,
            "bearer",
            access_token,
            APIVersion.V1,
            transport=self._transport,
        ) as api:
            resp = await api.get("/user/me")
            resp.raise_for_status()
            return UserProfile.model_validate(resp.json())
