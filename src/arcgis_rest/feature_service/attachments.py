"""Feature service attachment queries."""

from __future__ import annotations

from typing import Any

from arcgis_rest.request.params import clean_url
from arcgis_rest.request.transport import (
    AuthenticationProvider,
    RequestOptions,
    Transport,
)


async def get_attachments(
    transport: Transport,
    url: str,
    feature_id: int | str,
    authentication: AuthenticationProvider | None = None,
    params: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Request the ``attachmentInfos`` of a feature.

    Args:
        transport: Transport used to send the request
        url: Feature layer URL, e.g. ``.../FeatureServer/0``
        feature_id: Object id of the feature
        authentication: Provider used to authenticate the request
        params: Additional request parameters

    Returns:
        Response with ``attachmentInfos``
    """
    return await transport.request(
        f"{clean_url(url)}/{feature_id}/attachments",
        RequestOptions(
            http_method="GET", params=dict(params or {}), authentication=authentication
        ),
    )
