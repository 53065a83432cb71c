"""GeoEnrichment demographic queries."""

from __future__ import annotations

import json
import logging
from typing import Any

from arcgis_rest.request.params import append_custom_params, clean_url
from arcgis_rest.request.transport import (
    AuthenticationProvider,
    RequestOptions,
    Transport,
)

logger = logging.getLogger(__name__)

ARCGIS_ONLINE_GEOENRICHMENT_URL = (
    "https://geoenrich.arcgis.com/arcgis/rest/services/World/geoenrichmentserver/GeoEnrichment"
)

ENRICH_PARAMS = (
    "studyAreas",
    "dataCollections",
    "analysisVariables",
    "addDerivativeVariables",
    "returnGeometry",
    "inSR",
    "outSR",
)

# Sent as JSON strings
JSON_PARAMS = ("dataCollections", "analysisVariables")


async def query_demographic_data(
    transport: Transport,
    options: dict[str, Any],
    authentication: AuthenticationProvider | None = None,
    endpoint: str | None = None,
) -> dict[str, Any]:
    """Get facts about a location or area.

    Args:
        transport: Transport used to send the request
        options: Enrich options (``studyAreas``, ``dataCollections``,
            ``analysisVariables``, ``returnGeometry``, ``inSR``, ``outSR``,
            ``params``)
        authentication: Provider used to authenticate the request
        endpoint: GeoEnrichment service URL, defaults to ArcGIS Online

    Returns:
        Enrich response with ``results``

    Raises:
        ValueError: If no authentication is given
    """
    # the hosted service does not support anonymous requests
    if authentication is None:
        raise ValueError(
            "Geoenrichment using the ArcGIS service requires authentication"
        )

    params = append_custom_params(options, ENRICH_PARAMS)
    for name in JSON_PARAMS:
        if params.get(name):
            params[name] = json.dumps(params[name])

    url = clean_url(f"{endpoint or ARCGIS_ONLINE_GEOENRICHMENT_URL}/enrich")
    logger.debug(f"Enriching {len(params.get('studyAreas') or [])} study areas")

    return await transport.request(
        url, RequestOptions(params=params, authentication=authentication)
    )
