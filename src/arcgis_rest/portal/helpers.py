"""Portal request helpers."""

from __future__ import annotations

from typing import Any

from arcgis_rest.auth.models.flow import DEFAULT_PORTAL
from arcgis_rest.request.params import clean_url
from arcgis_rest.request.transport import AuthenticationProvider


def get_portal_url(
    portal: str | None = None, authentication: AuthenticationProvider | None = None
) -> str:
    """Resolve the portal REST URL for a request.

    An explicit portal wins, then the authentication provider's portal, then
    ArcGIS Online.
    """
    if portal:
        return clean_url(portal)
    if authentication is not None and getattr(authentication, "portal", None):
        return clean_url(authentication.portal)
    return DEFAULT_PORTAL


async def determine_owner(
    owner: str | None = None,
    item: dict[str, Any] | None = None,
    authentication: Any = None,
) -> str:
    """Work out the owner of an item.

    ``owner`` is used first, then ``item["owner"]``, then the username of the
    authenticated user.

    Raises:
        ValueError: If none of them are available
    """
    if owner:
        return owner
    if item and item.get("owner"):
        return item["owner"]
    if authentication is not None and hasattr(authentication, "get_username"):
        return await authentication.get_username()
    raise ValueError(
        "Could not determine the owner of this item. Pass the `owner`, "
        "`item.owner`, or `authentication` option."
    )


def is_bbox(extent: Any) -> bool:
    """Check for a bounding box given as two coordinate pairs."""
    return (
        isinstance(extent, (list, tuple))
        and len(extent) >= 2
        and isinstance(extent[0], (list, tuple))
        and isinstance(extent[1], (list, tuple))
    )


def bbox_to_string(extent: list[list[float]]) -> str:
    """Flatten ``[[xmin, ymin], [xmax, ymax]]`` into ``"xmin,ymin,xmax,ymax"``."""
    return ",".join(str(coordinate) for pair in extent for coordinate in pair)
