"""Platform API layer -- re-exports the client and resolvers."""

from snyk_app_auth.api.client import PlatformClient
from snyk_app_auth.api.orgs import OrgResolver
from snyk_app_auth.api.users import ProfileResolver

__all__ = ["OrgResolver", "PlatformClient", "ProfileResolver"]
