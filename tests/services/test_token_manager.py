"""Tests for OAuth 2.0 token request construction and response decoding.

High-impact tests covering the back half of the authorization code grant:
- Form body and header construction for public and confidential clients
- Refresh token requests
- Conversion to httpx requests without sending them
- Decoding through the manager and the descriptor
"""

import base64
from urllib.parse import parse_qs

import httpx
import pytest
from pydantic import ValidationError

from codeflow.models.error_codes import ErrorCode
from codeflow.models.errors import DecodeError
from codeflow.models.tokens import (
    Authentication,
    AuthenticationError,
    AuthenticationSuccess,
    Credentials,
    RefreshAuthentication,
)
from codeflow.primitives.decoders import LENIENT_DECODERS
from codeflow.services.tokens import OAuth2TokenManager


class TestBuildTokenRequest:
    """Test authorization code exchange request construction."""

    def setup_method(self):
        # Arrange
        self.token_manager = OAuth2TokenManager()
        self.authentication = Authentication(
            credentials=Credentials(client_id="client-456"),
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            url="https://auth.example.com/token",
        )

    def test_public_client_request(self):
        """Test request shape for a client without a secret."""
        # Act
        request = self.token_manager.build_token_request(self.authentication)

        # Assert
        assert request.method == "POST"
        assert request.url == "https://auth.example.com/token"
        assert request.headers == {
            "Content-Type": "application/x-www-form-urlencoded"
        }
        assert request.form_data() == {
            "grant_type": "authorization_code",
            "client_id": "client-456",
            "redirect_uri": "https://myapp.com/callback",
            "code": "auth-code-123",
        }

    def test_body_is_form_encoded_in_fixed_order(self):
        # Act
        request = self.token_manager.build_token_request(self.authentication)

        # Assert
        assert request.body == (
            "grant_type=authorization_code&client_id=client-456"
            "&redirect_uri=https%3A%2F%2Fmyapp.com%2Fcallback&code=auth-code-123"
        )

    def test_confidential_client_gets_basic_auth_and_body_client_id(self):
        """Test that both the header and the body carry the client id."""
        # Arrange
        authentication = Authentication(
            credentials=Credentials(client_id="client-456", secret="s"),
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            url="https://auth.example.com/token",
        )

        # Act
        request = self.token_manager.build_token_request(authentication)

        # Assert
        scheme, encoded = request.headers["Authorization"].split(" ", 1)
        assert scheme == "Basic"
        assert base64.b64decode(encoded).decode("utf-8") == "client-456:s"
        assert request.form_data()["client_id"] == "client-456"
        assert "client_secret" not in request.form_data()

    def test_public_client_has_no_authorization_header(self):
        # Act
        request = self.token_manager.build_token_request(self.authentication)

        # Assert
        assert "Authorization" not in request.headers

    def test_building_is_deterministic(self):
        # Act
        first = self.token_manager.build_token_request(self.authentication)
        second = self.token_manager.build_token_request(self.authentication)

        # Assert
        assert first == second
        assert first.body == second.body

    def test_headers_cannot_be_modified(self):
        """Test that the Authorization header is fixed once the request is built."""
        # Arrange
        authentication = Authentication(
            credentials=Credentials(client_id="client-456", secret="s"),
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            url="https://auth.example.com/token",
        )
        request = self.token_manager.build_token_request(authentication)
        original = request.headers["Authorization"]

        # Act & Assert
        with pytest.raises(TypeError):
            request.headers["Authorization"] = "Basic tampered"

        assert request.headers["Authorization"] == original

    def test_timeout_hint_is_carried(self):
        # Arrange
        token_manager = OAuth2TokenManager(timeout=5.0)

        # Act
        request = token_manager.build_token_request(self.authentication)

        # Assert
        assert request.timeout == 5.0

    def test_empty_client_id_is_rejected(self):
        with pytest.raises(ValidationError):
            Credentials(client_id="")


class TestBuildRefreshRequest:
    def setup_method(self):
        # Arrange
        self.token_manager = OAuth2TokenManager()

    def test_refresh_request_with_scope(self):
        # Arrange
        refresh = RefreshAuthentication(
            credentials=Credentials(client_id="client-456", secret="s"),
            refresh_token="refresh-token-abc",
            url="https://auth.example.com/token",
            scope=["read"],
        )

        # Act
        request = self.token_manager.build_refresh_request(refresh)

        # Assert
        assert request.form_data() == {
            "grant_type": "refresh_token",
            "client_id": "client-456",
            "refresh_token": "refresh-token-abc",
            "scope": "read",
        }
        assert request.headers["Authorization"].startswith("Basic ")

    def test_refresh_request_without_scope(self):
        # Arrange
        refresh = RefreshAuthentication(
            credentials=Credentials(client_id="client-456"),
            refresh_token="refresh-token-abc",
            url="https://auth.example.com/token",
        )

        # Act
        request = self.token_manager.build_refresh_request(refresh)

        # Assert
        assert "scope" not in request.form_data()
        assert "Authorization" not in request.headers


class TestHttpxConversion:
    def setup_method(self):
        # Arrange
        self.token_manager = OAuth2TokenManager(timeout=10.0)
        self.authentication = Authentication(
            credentials=Credentials(client_id="client-456", secret="s"),
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            url="https://auth.example.com/token",
        )

    def test_converted_request_matches_descriptor(self):
        """Test that the httpx request carries method, URL, headers and body."""
        # Arrange
        descriptor = self.token_manager.build_token_request(self.authentication)

        # Act
        request = descriptor.to_httpx_request()

        # Assert
        assert isinstance(request, httpx.Request)
        assert request.method == "POST"
        assert str(request.url) == "https://auth.example.com/token"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.headers["Authorization"] == descriptor.headers["Authorization"]
        assert parse_qs(request.content.decode("ascii")) == {
            "grant_type": ["authorization_code"],
            "client_id": ["client-456"],
            "redirect_uri": ["https://myapp.com/callback"],
            "code": ["auth-code-123"],
        }
        assert request.extensions["timeout"]["read"] == 10.0

    def test_no_timeout_extension_without_hint(self):
        # Arrange
        descriptor = OAuth2TokenManager(timeout=None).build_token_request(
            self.authentication
        )

        # Act
        request = descriptor.to_httpx_request()

        # Assert
        assert "timeout" not in request.extensions


class TestDecodeTokenResponse:
    def setup_method(self):
        # Arrange
        self.token_manager = OAuth2TokenManager()
        self.authentication = Authentication(
            credentials=Credentials(client_id="client-456"),
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            url="https://auth.example.com/token",
        )

    def test_descriptor_decodes_success(self):
        # Arrange
        descriptor = self.token_manager.build_token_request(self.authentication)

        # Act
        result = descriptor.decode(
            '{"access_token": "tok", "expires_in": 3600, "scope": "read write"}'
        )

        # Assert
        assert result == AuthenticationSuccess(
            token="tok", expires_in=3600, scope=("read", "write")
        )

    def test_manager_decodes_error(self):
        # Act
        result = self.token_manager.decode_token_response(
            '{"error": "invalid_grant", "error_description": "Code already used"}'
        )

        # Assert
        assert result == AuthenticationError(
            error=ErrorCode.INVALID_GRANT, error_description="Code already used"
        )

    def test_manager_decoders_travel_with_descriptor(self):
        """Test that a lenient manager produces lenient descriptors."""
        # Arrange
        token_manager = OAuth2TokenManager(decoders=LENIENT_DECODERS)
        descriptor = token_manager.build_token_request(self.authentication)

        # Act
        result = descriptor.decode('{"access_token": "tok", "scope": "a,b c"}')

        # Assert
        assert result.scope == ("a", "b", "c")

    def test_missing_access_token_raises_decode_error(self):
        with pytest.raises(DecodeError):
            self.token_manager.decode_token_response('{"expires_in": 3600}')

    def test_negative_expiry_raises_decode_error(self):
        with pytest.raises(DecodeError):
            self.token_manager.decode_token_response(
                '{"access_token": "tok", "expires_in": -1}'
            )
