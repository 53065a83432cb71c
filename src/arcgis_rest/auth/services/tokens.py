"""ArcGIS token endpoint interactions.

Wraps the OAuth 2.0 ``/oauth2/token`` endpoint, the legacy
``generateToken`` endpoint, token revocation and app access validation.
"""

from __future__ import annotations

import logging
from typing import Any

from arcgis_rest.auth.models.tokens import FetchTokenResponse
from arcgis_rest.request.errors import ArcGISRequestError
from arcgis_rest.request.params import clean_url
from arcgis_rest.request.transport import RequestOptions, Transport

logger = logging.getLogger(__name__)


async def fetch_token(
    transport: Transport, url: str, params: dict[str, Any]
) -> FetchTokenResponse:
    """Request a token from an OAuth 2.0 token endpoint.

    Args:
        transport: Transport used to send the request
        url: Token endpoint, e.g. ``{portal}/oauth2/token``
        params: Grant parameters (``grant_type``, ``client_id``, ...)

    Returns:
        FetchTokenResponse: Normalized token response

    Raises:
        ArcGISRequestError: If the request fails or the response has no token
    """
    options = RequestOptions(http_method="POST", params=params)
    logger.debug(
        f"Token request: grant_type={params.get('grant_type')}, "
        f"client_id={params.get('client_id')}"
    )

    response = await transport.request(url, options)

    try:
        return FetchTokenResponse.from_oauth_response(response)
    except (KeyError, TypeError) as e:
        raise ArcGISRequestError(
            "Token response missing required access_token",
            "INVALID_TOKEN_RESPONSE",
            response,
            url,
            options,
        ) from e


async def generate_token(
    transport: Transport, url: str, params: dict[str, Any]
) -> dict[str, Any]:
    """Request a token from a ``generateToken`` style endpoint.

    Used both for username/password sign in and for exchanging a portal
    token for a federated server token.

    Returns:
        Raw response containing ``token`` and ``expires`` (epoch ms)

    Raises:
        ArcGISRequestError: If the request fails or the response has no token
    """
    options = RequestOptions(http_method="POST", params=params)
    response = await transport.request(url, options)

    if not isinstance(response, dict) or "token" not in response:
        raise ArcGISRequestError(
            "Token response missing required token",
            "INVALID_TOKEN_RESPONSE",
            response,
            url,
            options,
        )
    return response


async def revoke_token(
    transport: Transport,
    token: str,
    client_id: str | None = None,
    portal: str = "https://www.arcgis.com/sharing/rest",
) -> dict[str, Any]:
    """Revoke an access or refresh token.

    Raises:
        ArcGISRequestError: If the portal does not confirm the revocation
    """
    url = f"{clean_url(portal)}/oauth2/revokeToken/"
    options = RequestOptions(
        http_method="POST",
        params={"client_id": client_id, "auth_token": token, "token": token},
    )

    response = await transport.request(url, options)

    if not response.get("success"):
        raise ArcGISRequestError("Unable to revoke token", 500, response, url, options)

    logger.info(f"Revoked token at {url}")
    return response


async def validate_app_access(
    transport: Transport,
    token: str,
    client_id: str,
    portal: str = "https://www.arcgis.com/sharing/rest",
) -> dict[str, Any]:
    """Check whether the token's user may access the app ``client_id``.

    Returns:
        Response with ``value`` (bool) and ``viewOnlyUserTypeApp`` (bool)
    """
    url = f"{clean_url(portal)}/oauth2/validateAppAccess"
    options = RequestOptions(
        http_method="POST", params={"client_id": client_id, "token": token}
    )
    return await transport.request(url, options)
