"""Persisted and interop credential records.

``IdentityRecord`` is the flat record produced by
``ArcGISIdentityManager.serialize``. ``Credential`` and ``ServerInfo`` mirror
the credential objects used by the ArcGIS Maps SDK identity manager.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IdentityRecord(BaseModel):
    """Serialized identity manager state. Expiry fields are epoch milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str | None = Field(default=None, alias="clientId")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    refresh_token_expires: int | None = Field(default=None, alias="refreshTokenExpires")
    username: str | None = None
    password: str | None = None
    token: str | None = None
    token_expires: int | None = Field(default=None, alias="tokenExpires")
    portal: str | None = None
    ssl: bool | None = None
    token_duration: int | None = Field(default=None, alias="tokenDuration")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    server: str | None = None

    def to_dict(self) -> dict:
        """Record as a camelCase dictionary without empty fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Credential(BaseModel):
    """Platform-native credential (``esri/identity/Credential``)."""

    model_config = ConfigDict(populate_by_name=True)

    server: str
    token: str
    expires: int | None = None  # epoch ms
    ssl: bool | None = None
    user_id: str | None = Field(default=None, alias="userId")


class ServerInfo(BaseModel):
    """Platform-native server info (``esri/identity/ServerInfo``)."""

    model_config = ConfigDict(populate_by_name=True)

    server: str | None = None
    has_server: bool = Field(default=False, alias="hasServer")
    has_portal: bool = Field(default=False, alias="hasPortal")
    token_service_url: str | None = Field(default=None, alias="tokenServiceUrl")
