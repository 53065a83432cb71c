"""API key authentication."""

from __future__ import annotations

from arcgis_rest.auth.models.flow import DEFAULT_PORTAL


class ApiKeyManager:
    """Authenticates requests with an ArcGIS API key.

    Can be passed anywhere an authentication provider is accepted. The key is
    sent as the token for every URL.
    """

    def __init__(self, key: str, portal: str = DEFAULT_PORTAL):
        self.key = key
        self.portal = portal

    @classmethod
    def from_key(cls, key: str) -> ApiKeyManager:
        return cls(key)

    async def get_token(self, url: str) -> str:
        return self.key
