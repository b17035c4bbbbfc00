"""Resolve the organization an App installation is authorized for."""

from __future__ import annotations

import httpx
from loguru import logger

from ..config import APIVersion, Configuration
from ..errors import NoAuthorizedResource, ResolutionError
from ..models.auth import ResourceScope
from .client import PlatformClient


class OrgResolver:
    """Look up the App's organization with a freshly issued access token.

    The platform may list several organizations.  The first one returned
    is selected; multi-organization installs are not supported.
    """

    def __init__(
        self,
        config: Configuration,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    async def resolve(self, token_type: str, access_token: str) -> ResourceScope:
        """Return the :class:`ResourceScope` for *access_token*.

        Raises :class:`NoAuthorizedResource` when the organization list is
        empty and :class:`ResolutionError` on transport failures, non-2xx
        responses, or malformed bodies.  Nothing is retried.
        """
        path = f"/apps/{self.config.client_id}/orgs"
        try:
            async with PlatformClient(
                self.config,
                token_type,
                access_token,
                APIVersion.V3,
                transport=self._transport,
            ) as api:
                resp = await api.get(path, params={"version": self.config.api_version})
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as exc:
            logger.error(f"Error fetching org info: {exc}")
            raise ResolutionError(f"Organization lookup failed: {exc}", cause=exc) from exc
        except ValueError as exc:
            logger.error(f"Organization lookup returned invalid JSON: {exc}")
            raise ResolutionError("Organization lookup returned invalid JSON", cause=exc) from exc

        return _first_org(body)


def _first_org(body: object) -> ResourceScope:
    """Extract the first organization id from a ``{"data": [...]}`` body."""
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list):
        raise ResolutionError("Organization lookup returned no data collection")
    if not data:
        raise NoAuthorizedResource("The App is not authorized for any organization")
    first = data[0]
    org_id = first.get("id") if isinstance(first, dict) else None
    if not isinstance(org_id, str) or not org_id:
        raise ResolutionError("Organization entry has no id")
    if len(data) > 1:
        logger.debug(f"{len(data)} organizations authorized, using the first ({org_id})")
    return ResourceScope(orgId=org_id)
