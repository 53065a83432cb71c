"""HTTP transport for ArcGIS REST requests.

Defines the transport capability consumed by the identity manager and the
endpoint wrappers, and a default implementation on top of httpx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import httpx

from arcgis_rest.request.errors import ArcGISAuthError, ArcGISRequestError
from arcgis_rest.request.params import encode_params

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST"]
CredentialsPolicy = Literal["include", "same-origin"]

# ArcGIS error codes and OAuth error strings that mean the credentials were rejected
AUTH_ERROR_CODES = {498, 499, "498", "499", "invalid_token", "invalid_request"}


class AuthenticationProvider(Protocol):
    """Anything that can supply a token for a request URL."""

    portal: str

    async def get_token(self, url: str) -> str | None:
        """Return the token to attach to a request sent to ``url``."""
        ...


@dataclass
class RequestOptions:
    """Options for a single ArcGIS REST request."""

    http_method: HttpMethod = "POST"
    params: dict[str, Any] = field(default_factory=dict)
    authentication: AuthenticationProvider | None = None
    credentials: CredentialsPolicy | None = None
    raw_response: bool = False
    headers: dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    """Sends ArcGIS REST requests and returns parsed JSON responses.

    Implementations must raise ``ArcGISRequestError`` (or ``ArcGISAuthError``
    for rejected credentials) on failure.
    """

    async def request(self, url: str, options: RequestOptions | None = None) -> Any:
        ...


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Adds ``f=json`` and, when the options carry an authentication provider,
    the token for the request URL. Responses are parsed as JSON and ArcGIS
    error bodies (which usually come back with HTTP 200) are raised as
    exceptions.
    """

    def __init__(self, timeout: float = 30.0):
        """Initialize the transport.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def request(self, url: str, options: RequestOptions | None = None) -> Any:
        """Send a request and return the parsed response.

        Args:
            url: Endpoint URL
            options: Request options

        Returns:
            Parsed JSON body, or the ``httpx.Response`` when ``raw_response``
            is set

        Raises:
            ArcGISAuthError: If the server rejected the credentials
            ArcGISRequestError: For any other failure
        """
        options = options or RequestOptions()
        params: dict[str, Any] = {"f": "json", **options.params}

        if options.authentication is not None and not params.get("token"):
            token = await options.authentication.get_token(url)
            if token:
                params["token"] = token

        if options.credentials:
            logger.debug(f"Credentials policy for {url}: {options.credentials}")

        encoded = encode_params(params)
        headers = {"Accept": "application/json", **options.headers}

        logger.debug(f"{options.http_method} {url}")

        try:
            if options.http_method == "GET":
                response = await self._http_client.get(
                    url, params=encoded, headers=headers
                )
            else:
                response = await self._http_client.post(
                    url, data=encoded, headers=headers
                )
        except httpx.HTTPError as e:
            raise ArcGISRequestError(
                f"HTTP error during request: {e}", "HTTP_ERROR", None, url, options
            ) from e

        if options.raw_response:
            return response

        return self._parse_response(response, url, options)

    def _parse_response(
        self, response: httpx.Response, url: str, options: RequestOptions
    ) -> Any:
        """Parse a response body and raise on ArcGIS error payloads."""
        try:
            data = response.json()
        except ValueError as e:
            raise ArcGISRequestError(
                f"Invalid JSON response (HTTP {response.status_code})",
                response.status_code,
                response.text,
                url,
                options,
            ) from e

        if isinstance(data, dict) and "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                # {"error": {"code": 498, "message": "Invalid token.", "details": []}}
                code = error.get("code", "UNKNOWN_ERROR_CODE")
                message = error.get("message") or "UNKNOWN_ERROR"
            else:
                # OAuth style {"error": "invalid_request", "error_description": "..."}
                code = error
                message = data.get("error_description") or str(error)

            if code in AUTH_ERROR_CODES:
                raise ArcGISAuthError(message, code, data, url, options)
            raise ArcGISRequestError(message, code, data, url, options)

        if response.status_code >= 400:
            raise ArcGISRequestError(
                f"HTTP {response.status_code}",
                response.status_code,
                data,
                url,
                options,
            )

        return data

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
