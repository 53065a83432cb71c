"""ArcGIS OAuth 2.0 authorization flow orchestration.

Builds authorization URLs for the portal's ``/oauth2/authorize`` endpoint and
parses the callback the authorization server redirects back to. The user
interaction in between is delegated to an ``AuthorizationHandler``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol
from urllib.parse import parse_qs, urlencode, urlparse

from arcgis_rest.auth.models.errors import ArcGISAccessDeniedError
from arcgis_rest.auth.models.flow import AuthorizationResponse, OAuth2Options
from arcgis_rest.auth.primitives.pkce import PKCEManager, PKCEParameters
from arcgis_rest.auth.services.security import generate_state, validate_state
from arcgis_rest.request.errors import ArcGISAuthError
from arcgis_rest.request.params import clean_url

logger = logging.getLogger(__name__)


class AuthorizationHandler(Protocol):
    """Protocol for handling the user authorization step.

    Allows different strategies for user interaction:
    - Manual (print the URL and paste the callback URL back)
    - Browser automation (open browser + local callback server)
    - Custom UI integration
    """

    async def handle_authorization(self, auth_url: str) -> str:
        """Handle user authorization and return the callback URL.

        Args:
            auth_url: Authorization URL for the user to visit

        Returns:
            Callback URL received after user authorization
        """
        ...


class ManualAuthorizationHandler:
    """Authorization handler that delegates to a callback function.

    Suitable for CLI tools that print the URL and read the callback URL
    back from the user.
    """

    def __init__(
        self, callback_handler: Callable[[str], Awaitable[str]] | None = None
    ):
        self.callback_handler = callback_handler

    async def handle_authorization(self, auth_url: str) -> str:
        if self.callback_handler:
            return await self.callback_handler(auth_url)
        raise NotImplementedError(
            f"Please visit {auth_url} and provide the callback URL"
        )


class OAuth2FlowManager:
    """Builds authorization requests and validates their callbacks."""

    def __init__(self):
        self._pkce_manager = PKCEManager()

    def start_authorization_flow(
        self, options: OAuth2Options
    ) -> tuple[str, PKCEParameters, str]:
        """Generate PKCE parameters and state and build the authorization URL.

        Returns:
            Tuple of (authorization_url, pkce_parameters, state)
        """
        pkce_params = self._pkce_manager.generate_parameters()
        state = options.state or generate_state()

        authorize_url = f"{clean_url(options.portal)}/oauth2/authorize"
        params: dict[str, Any] = {
            "client_id": options.client_id,
            "response_type": "code",
            "expiration": options.expiration,
            "redirect_uri": options.redirect_uri,
            "state": json.dumps({"id": state}),
            "locale": options.locale,
            "style": options.style,
        }

        # Social logins go through a dedicated endpoint
        if options.provider != "arcgis":
            authorize_url = f"{clean_url(options.portal)}/oauth2/social/authorize"
            params["socialLoginProviderName"] = options.provider
            params["autoAccountCreateForSocial"] = "true"

        params["code_challenge"] = pkce_params.code_challenge
        params["code_challenge_method"] = pkce_params.code_challenge_method
        params.update(options.params)

        logger.debug(f"Starting authorization flow for client {options.client_id}")

        return f"{authorize_url}?{urlencode(params)}", pkce_params, state

    def handle_authorization_callback(
        self, callback_url: str, expected_state: str
    ) -> str:
        """Validate a callback URL and return its authorization code.

        Raises:
            ArcGISAccessDeniedError: If the user declined the request
            ArcGISAuthError: For missing or mismatched state and other errors
        """
        auth_response = self._parse_callback_url(callback_url)

        validate_state(expected_state, auth_response.state)

        if auth_response.is_error():
            logger.warning(
                f"Authorization callback contained error: {auth_response.error}"
            )
            if auth_response.error == "access_denied":
                raise ArcGISAccessDeniedError()
            raise ArcGISAuthError(
                auth_response.error_description or "Unknown error",
                auth_response.error,
            )

        if not auth_response.is_success():
            raise ArcGISAuthError("Unknown error", "oauth-error")

        return auth_response.code

    def _parse_callback_url(self, callback_url: str) -> AuthorizationResponse:
        """Parse an OAuth callback URL into an ``AuthorizationResponse``.

        The ``state`` parameter is the JSON document sent with the request;
        its ``id`` member is the state value.
        """
        query_params = parse_qs(urlparse(callback_url).query)

        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        state = get_single_param("state")
        if state:
            try:
                state = json.loads(state).get("id")
            except (ValueError, AttributeError):
                state = None

        return AuthorizationResponse(
            code=get_single_param("code"),
            state=state,
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
        )
