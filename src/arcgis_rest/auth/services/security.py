"""State parameter utilities for ArcGIS OAuth 2.0 flows."""

from __future__ import annotations

import secrets
import string

from arcgis_rest.request.errors import ArcGISAuthError


def generate_state() -> str:
    """Generate a cryptographically secure 32-character state parameter."""
    alphabet = string.ascii_letters + string.digits + "-._~"
    return "".join(secrets.choice(alphabet) for _ in range(32))


def validate_state(expected: str, actual: str | None) -> None:
    """Validate the callback state against the one sent with the request.

    Raises:
        ArcGISAuthError: If the state is missing or does not match
    """
    if not actual:
        raise ArcGISAuthError(
            "No authentication state was found in the authorization callback.",
            "no-auth-state",
        )
    if not secrets.compare_digest(expected, actual):
        raise ArcGISAuthError(
            "Saved client state did not match server sent state.",
            "mismatched-auth-state",
        )
