"""Exception hierarchy for OAuth 2.0 authorization code client errors.

Only malformed input raises. Provider-declared OAuth errors and redirects
without OAuth parameters are returned as values, never raised.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 client errors."""

    pass


class DecodeError(OAuth2Error):
    """Raised when a token endpoint response body is malformed.

    Indicates a non-compliant server response (missing access_token,
    non-numeric expires_in, invalid JSON), not an OAuth error response.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class AuthorizationResponseError(OAuth2Error):
    """Raised when a strict parser rejects a redirect query parameter."""

    pass


class StateValidationError(AuthorizationResponseError):
    """Raised when OAuth state parameter validation fails.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack or authorization server issue.
    """

    pass

