"""OAuth 2.0 token request service.

Builds token endpoint requests for the authorization code grant
(RFC 6749 Section 4.1.3) and refresh grant (Section 6), and decodes the
endpoint's responses (Section 5). Nothing here performs I/O; sending the
request is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from codeflow.models.requests import FORM_CONTENT_TYPE, TokenRequestDescriptor
from codeflow.models.tokens import (
    Authentication,
    AuthenticationResult,
    Credentials,
    RefreshAuthentication,
)
from codeflow.primitives.decoders import (
    DEFAULT_DECODERS,
    DecoderSet,
    decode_token_response,
)
from codeflow.primitives.security import basic_auth_header

logger = logging.getLogger(__name__)


class OAuth2TokenManager:
    """Builds OAuth 2.0 token endpoint requests and decodes their responses.

    Confidential clients (credentials with a secret) get an HTTP Basic
    Authorization header. client_id is sent in the form body as well, for
    both public and confidential clients.
    """

    def __init__(
        self,
        decoders: DecoderSet = DEFAULT_DECODERS,
        timeout: float | None = 30.0,
    ):
        """Initialize OAuth token manager.

        Args:
            decoders: Response decoding strategies attached to each request
            timeout: Request timeout hint in seconds for the transport
        """
        self.decoders = decoders
        self.timeout = timeout

    def build_token_request(
        self, authentication: Authentication
    ) -> TokenRequestDescriptor:
        """Build the authorization code exchange request.

        Args:
            authentication: Code, redirect URI, endpoint and client credentials

        Returns:
            TokenRequestDescriptor for a POST to the token endpoint
        """
        form = (
            ("grant_type", "authorization_code"),
            ("client_id", authentication.credentials.client_id),
            ("redirect_uri", authentication.redirect_uri),
            ("code", authentication.code),
        )

        logger.debug(
            f"Token request: grant_type=authorization_code, "
            f"client_id={authentication.credentials.client_id}, "
            f"endpoint={authentication.url}"
        )

        return self._descriptor(authentication.url, form, authentication.credentials)

    def build_refresh_request(
        self, refresh: RefreshAuthentication
    ) -> TokenRequestDescriptor:
        """Build a refresh token request.

        Args:
            refresh: Refresh token, endpoint, credentials and optional scope

        Returns:
            TokenRequestDescriptor for a POST to the token endpoint
        """
        form = [
            ("grant_type", "refresh_token"),
            ("client_id", refresh.credentials.client_id),
            ("refresh_token", refresh.refresh_token),
        ]
        if refresh.scope:
            form.append(("scope", " ".join(refresh.scope)))

        logger.debug(
            f"Refresh request: client_id={refresh.credentials.client_id}, "
            f"endpoint={refresh.url}"
        )

        return self._descriptor(refresh.url, tuple(form), refresh.credentials)

    def decode_token_response(
        self, body: str | bytes | Mapping[str, Any]
    ) -> AuthenticationResult:
        """Decode a token endpoint response body.

        Raises:
            DecodeError: If the body is malformed
        """
        return decode_token_response(body, self.decoders)

    def _descriptor(
        self,
        url: str,
        form: tuple[tuple[str, str], ...],
        credentials: Credentials,
    ) -> TokenRequestDescriptor:
        headers = {"Content-Type": FORM_CONTENT_TYPE}

        authorization = basic_auth_header(credentials)
        if authorization is not None:
            headers["Authorization"] = authorization

        return TokenRequestDescriptor(
            url=url,
            form=form,
            headers=headers,
            decoders=self.decoders,
            timeout=self.timeout,
        )
