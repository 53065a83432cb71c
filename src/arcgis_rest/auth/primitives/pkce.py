"""PKCE (Proof Key for Code Exchange) parameters for ArcGIS OAuth 2.0.

Implements RFC 7636 parameter generation used by the interactive
authorization flow of the identity manager.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass


@dataclass(frozen=True)
class PKCEParameters:
    """Verifier and S256 challenge generated for one authorization flow."""

    code_verifier: str
    code_challenge: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")


class PKCEManager:
    """Generates PKCE parameters for authorization code flows."""

    def generate_parameters(self) -> PKCEParameters:
        """Generate a new verifier and its S256 challenge."""
        code_verifier = self._generate_code_verifier()
        return PKCEParameters(
            code_verifier=code_verifier,
            code_challenge=self._generate_code_challenge(code_verifier),
        )

    def _generate_code_verifier(self) -> str:
        """Generate a 128-character verifier from the RFC 7636 unreserved set."""
        alphabet = string.ascii_letters + string.digits + "-._~"
        return "".join(secrets.choice(alphabet) for _ in range(128))

    def _generate_code_challenge(self, code_verifier: str) -> str:
        """BASE64URL-ENCODE(SHA256(ASCII(code_verifier))) without padding."""
        digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
        return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
