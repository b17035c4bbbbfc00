"""Base HTTP client for the platform API."""

from __future__ import annotations

import httpx

from ..config import APIVersion, Configuration


class PlatformClient:
    """Async HTTP client authenticated with one access token.

    Every request carries ``Authorization: <token_type> <access_token>``
    and is sent relative to the base URL of the chosen API version.  The
    client does not retry; timeouts are those of the underlying
    :class:`httpx.AsyncClient`.

    Example::

        async with PlatformClient(config, "bearer", token, APIVersion.V1) as api:
            resp = await api.get("/user/me")
    """

    def __init__(
        self,
        config: Configuration,
        token_type: str,
        access_token: str,
        version: APIVersion = APIVersion.V3,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.config = config
        self.version = version
        self._http = httpx.AsyncClient(
            base_url=config.base_url(version),
            headers={
                "Authorization": f"{token_type} {access_token}",
                "Content-Type": "application/vnd.api+json",
            },
            transport=transport,
            timeout=timeout,
        )

    def __repr__(self) -> str:
        return f"PlatformClient(version={self.version.value!r})"

    async def get(self, path: str, **kwargs) -> httpx.Response:
        """Send an authenticated GET request to ``base_url + path``."""
        return await self._http.get(path, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP transport."""
        await self._http.aclose()

    async def __aenter__(self) -> PlatformClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
