"""Token models and expiry helpers.

Expiry instants are timezone-aware UTC datetimes in memory and epoch
milliseconds on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_epoch_ms(value: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime. Naive values are read as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(round(value.timestamp() * 1000))


def is_expired(expires: datetime | None, now: datetime | None = None) -> bool:
    """Check whether an expiry instant is at or before now.

    A missing expiry is never expired.
    """
    if expires is None:
        return False
    return expires <= (now or utc_now())


@dataclass(frozen=True)
class ServerToken:
    """Token negotiated for a single federated or trusted server."""

    token: str | None
    expires: datetime | None = None

    def is_valid(self) -> bool:
        """A cached server token is usable only with a future expiry."""
        return bool(self.token) and self.expires is not None and not is_expired(
            self.expires
        )


@dataclass(frozen=True)
class FetchTokenResponse:
    """Normalized response from an OAuth 2.0 token endpoint."""

    token: str
    expires: datetime
    username: str | None = None
    ssl: bool = False
    refresh_token: str | None = None
    refresh_token_expires: datetime | None = None

    @classmethod
    def from_oauth_response(cls, data: dict) -> FetchTokenResponse:
        """Build from a raw ``/oauth2/token`` response.

        Durations in the response are seconds relative to now.
        """
        now = utc_now()
        refresh_expires_in = data.get("refresh_token_expires_in")
        return cls(
            token=data["access_token"],
            expires=now + timedelta(seconds=data["expires_in"]),
            username=data.get("username"),
            ssl=data.get("ssl") is True,
            refresh_token=data.get("refresh_token"),
            refresh_token_expires=(
                now + timedelta(seconds=refresh_expires_in)
                if refresh_expires_in is not None
                else None
            ),
        )
