"""OAuth 2.0 authorization code flow service.

Builds the authorization URL that starts a flow and classifies the
provider's redirect back to the client (RFC 6749 Sections 4.1.1 and 4.1.2).
"""

from __future__ import annotations

import logging

from codeflow.models.flow import (
    Authorization,
    AuthorizationEmpty,
    AuthorizationResult,
)
from codeflow.primitives.query import (
    DEFAULT_QUERY_PARSERS,
    QueryParserSet,
    parse_query,
)
from codeflow.primitives.security import validate_state

logger = logging.getLogger(__name__)


class OAuth2FlowManager:
    """Front half of the authorization code grant.

    Handles:
    - Authorization URL construction
    - Redirect classification into Empty, Error or Success
    - Optional state validation (CSRF protection)

    Holds no per-flow state; one instance can serve any number of flows.
    """

    def __init__(self, parsers: QueryParserSet = DEFAULT_QUERY_PARSERS):
        """Initialize the OAuth flow manager.

        Args:
            parsers: Query parsing strategies applied to redirect URLs
        """
        self.parsers = parsers

    def build_authorization_url(self, authorization: Authorization) -> str:
        """Build the URL the user agent is sent to for authorization.

        Args:
            authorization: Authorization request configuration

        Returns:
            Authorization endpoint URL with response_type, client_id,
            redirect_uri and, when set, scope and state
        """
        authorization_url = authorization.build_authorization_url()
        logger.debug(
            f"Generated authorization URL for client {authorization.client_id}"
        )
        return authorization_url

    def classify_callback(self, callback_url: str) -> AuthorizationResult:
        """Classify a redirect URL as an authorization response.

        Only the query is inspected. A code wins over an error when both
        are present.

        Args:
            callback_url: Full URL the provider redirected to

        Returns:
            AuthorizationSuccess, AuthorizationError or AuthorizationEmpty

        Raises:
            AuthorizationResponseError: Only if a strict parser set rejects
                a field
        """
        params = parse_query(callback_url)

        code = self.parsers.code_parser(params)
        error = self.parsers.error_parser(params)

        if code is not None:
            success = self.parsers.authorization_success_parser(code, params)
            if success is not None:
                if error is not None:
                    logger.warning(
                        "Authorization callback contained both code and error, "
                        "using code"
                    )
                logger.info("Authorization callback contained authorization code")
                return success
        elif error is not None:
            auth_error = self.parsers.authorization_error_parser(error, params)
            if auth_error is not None:
                logger.warning(
                    f"Authorization callback contained error: {error.value} - "
                    f"{auth_error.error_description}"
                )
                return auth_error

        logger.debug("Authorization callback carried no OAuth response")
        return AuthorizationEmpty()

    def handle_authorization_callback(
        self, callback_url: str, expected_state: str
    ) -> AuthorizationResult:
        """Classify a redirect URL and validate its state parameter.

        Empty results are returned without state checks; there is no
        response to validate.

        Args:
            callback_url: Full URL the provider redirected to
            expected_state: State sent in the authorization request

        Returns:
            The classified authorization result

        Raises:
            StateValidationError: If state is missing or doesn't match
        """
        result = self.classify_callback(callback_url)
        if isinstance(result, AuthorizationEmpty):
            return result

        validate_state(expected_state, result.state)
        return result
