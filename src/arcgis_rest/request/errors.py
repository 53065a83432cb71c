"""Exception hierarchy for ArcGIS REST request failures.

The transport raises these for any failed request so that higher layers can
re-wrap them with operation-specific codes without losing the upstream
message, response, URL or request options.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from arcgis_rest.request.transport import RequestOptions


class ArcGISRequestError(Exception):
    """Raised when a request to an ArcGIS REST endpoint fails.

    Attributes:
        message: Formatted message, prefixed with the error code when known
        code: ArcGIS error code, HTTP status or short string code
        original_message: Message as reported by the server
        response: Parsed response body, if any
        url: URL the request was sent to
        options: Options the request was sent with
    """

    def __init__(
        self,
        message: str = "UNKNOWN_ERROR",
        code: str | int = "UNKNOWN_ERROR_CODE",
        response: Any = None,
        url: str | None = None,
        options: RequestOptions | None = None,
    ):
        self.code = code
        self.original_message = message
        self.message = message if code == "UNKNOWN_ERROR_CODE" else f"{code}: {message}"
        self.response = response
        self.url = url
        self.options = options
        super().__init__(self.message)


class ArcGISAuthError(ArcGISRequestError):
    """Raised when a request fails because its credentials were rejected."""

    def __init__(
        self,
        message: str = "AUTHENTICATION_ERROR",
        code: str | int = "AUTHENTICATION_ERROR_CODE",
        response: Any = None,
        url: str | None = None,
        options: RequestOptions | None = None,
    ):
        super().__init__(message, code, response, url, options)
