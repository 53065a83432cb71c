"""Exception hierarchy for ArcGIS token acquisition errors.

Each failure mode of the identity manager carries a specific reason code so
callers can tell a refused federation apart from an expired refresh token.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from arcgis_rest.request.errors import ArcGISAuthError

if TYPE_CHECKING:
    from arcgis_rest.request.transport import RequestOptions


class TokenRequestErrorCode(str, Enum):
    """Reason codes for ``ArcGISTokenRequestError``."""

    TOKEN_REFRESH_FAILED = "TOKEN_REFRESH_FAILED"
    GENERATE_TOKEN_FOR_SERVER_FAILED = "GENERATE_TOKEN_FOR_SERVER_FAILED"
    REFRESH_TOKEN_EXCHANGE_FAILED = "REFRESH_TOKEN_EXCHANGE_FAILED"
    NOT_FEDERATED = "NOT_FEDERATED"
    UNKNOWN = "UNKNOWN"


class ArcGISTokenRequestError(Exception):
    """Raised when the identity manager cannot obtain a token."""

    def __init__(
        self,
        message: str = "UNKNOWN_ERROR",
        code: TokenRequestErrorCode = TokenRequestErrorCode.UNKNOWN,
        response: Any = None,
        url: str | None = None,
        options: RequestOptions | None = None,
    ):
        self.code = code
        self.message = f"{code.value}: {message}"
        self.response = response
        self.url = url
        self.options = options
        super().__init__(self.message)


class ArcGISAccessDeniedError(ArcGISAuthError):
    """Raised when the user declines the request on the authorization screen."""

    def __init__(self):
        super().__init__(
            "The user has denied your authorization request.", "ACCESS_DENIED"
        )
