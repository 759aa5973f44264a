"""Security utilities for OAuth 2.0 authorization code flows.

Provides state parameter generation and validation, HTTP Basic client
authentication, and the character-class checks of RFC 6749 Appendix A.
"""

from __future__ import annotations

import base64
import re
import secrets
import string

from codeflow.models.errors import StateValidationError
from codeflow.models.tokens import Credentials

# RFC 6749 Appendix A.5: state = 1*VSCHAR
_VSCHAR = re.compile(r"[\x20-\x7e]+")
# Appendix A.6: error-description = 1*( %x20-21 / %x23-5B / %x5D-7E )
_ERROR_DESCRIPTION = re.compile(r"[\x20-\x21\x23-\x5b\x5d-\x7e]+")
# Appendix A.8: error-uri = URI-reference, restricted to %x21 / %x23-5B / %x5D-7E
_ERROR_URI = re.compile(r"[\x21\x23-\x5b\x5d-\x7e]+")


def generate_state() -> str:
    """Generate cryptographically secure state parameter.

    The state parameter provides CSRF protection by ensuring the callback
    matches the original authorization request.

    Returns:
        Cryptographically secure random state string (32 characters)
    """
    alphabet = string.ascii_letters + string.digits + "-._~"
    return "".join(secrets.choice(alphabet) for _ in range(32))


def validate_state(expected: str, actual: str | None) -> None:
    """Validate state parameter matches expected value.

    Args:
        expected: State parameter from original authorization request
        actual: State parameter from callback URL

    Raises:
        StateValidationError: If state is missing or doesn't match
    """
    if actual is None:
        raise StateValidationError(
            "Authorization server callback missing required state parameter"
        )
    if not secrets.compare_digest(expected.encode("utf-8"), actual.encode("utf-8")):
        raise StateValidationError("State parameter mismatch - possible CSRF attack")


def basic_auth_header(credentials: Credentials) -> str | None:
    """Build the HTTP Basic Authorization header value for a client.

    Returns None for public clients (no secret). The client id and secret
    are joined with a colon and base64-encoded as UTF-8 without further
    escaping, so a colon inside the client id is sent as-is.
    """
    if not credentials.is_confidential():
        return None
    userpass = f"{credentials.client_id}:{credentials.secret}".encode("utf-8")
    return f"Basic {base64.b64encode(userpass).decode('ascii')}"


def is_valid_state(value: str) -> bool:
    return _VSCHAR.fullmatch(value) is not None


def is_valid_error_description(value: str) -> bool:
    return _ERROR_DESCRIPTION.fullmatch(value) is not None


def is_valid_error_uri(value: str) -> bool:
    return _ERROR_URI.fullmatch(value) is not None
