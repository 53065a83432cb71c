"""Authorization flow models for ArcGIS OAuth 2.0.

Contains the options shared by the authorization entry points and the parsed
callback response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_PORTAL = "https://www.arcgis.com/sharing/rest"
DEFAULT_TOKEN_DURATION = 20160  # minutes (two weeks)


@dataclass(frozen=True)
class OAuth2Options:
    """Options for the OAuth 2.0 entry points of the identity manager."""

    client_id: str
    redirect_uri: str
    portal: str = DEFAULT_PORTAL
    provider: str = "arcgis"
    expiration: int = DEFAULT_TOKEN_DURATION
    locale: str = ""
    style: str = ""
    state: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None
