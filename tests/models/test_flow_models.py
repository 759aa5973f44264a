"""Tests for authorization request configuration and URL building."""

from urllib.parse import parse_qs, urlparse

import pytest

from codeflow.models.flow import Authorization


class TestAuthorization:
    def test_empty_client_id_is_rejected(self):
        """Test that client_id must be non-empty."""
        with pytest.raises(ValueError):
            Authorization(
                client_id="",
                url="https://auth.example.com/authorize",
                redirect_uri="https://myapp.com/callback",
            )

    def test_scope_string_is_rejected(self):
        """Test that a bare string is not mistaken for a scope sequence."""
        with pytest.raises(TypeError):
            Authorization(
                client_id="client-123",
                url="https://auth.example.com/authorize",
                redirect_uri="https://myapp.com/callback",
                scope="read write",
            )

    def test_scope_is_frozen_as_tuple(self):
        """Test that a list scope is stored immutably in order."""
        # Arrange
        scope = ["read", "write"]

        # Act
        authorization = Authorization(
            client_id="client-123",
            url="https://auth.example.com/authorize",
            redirect_uri="https://myapp.com/callback",
            scope=scope,
        )
        scope.append("admin")

        # Assert
        assert authorization.scope == ("read", "write")


class TestBuildAuthorizationUrl:
    def test_url_contains_all_parameters_percent_encoded(self):
        """Test the complete URL with scope and state."""
        # Arrange
        authorization = Authorization(
            client_id="abc",
            url="https://auth.example.com/authorize",
            redirect_uri="https://app.test/cb",
            scope=["read", "write"],
            state="xyz",
        )

        # Act
        url = authorization.build_authorization_url()

        # Assert
        assert url == (
            "https://auth.example.com/authorize?response_type=code&client_id=abc"
            "&redirect_uri=https%3A%2F%2Fapp.test%2Fcb&scope=read%20write&state=xyz"
        )

    def test_empty_scope_and_missing_state_are_omitted(self):
        """Test that optional parameters are left out entirely."""
        # Arrange
        authorization = Authorization(
            client_id="abc",
            url="https://auth.example.com/authorize",
            redirect_uri="https://app.test/cb",
        )

        # Act
        query_params = parse_qs(urlparse(authorization.build_authorization_url()).query)

        # Assert
        assert set(query_params) == {"response_type", "client_id", "redirect_uri"}

    def test_existing_endpoint_query_is_kept(self):
        """Test that a query already on the endpoint URL survives."""
        # Arrange
        authorization = Authorization(
            client_id="abc",
            url="https://auth.example.com/authorize?tenant=acme",
            redirect_uri="https://app.test/cb",
        )

        # Act
        url = authorization.build_authorization_url()

        # Assert
        assert url.startswith("https://auth.example.com/authorize?tenant=acme&")
        assert parse_qs(urlparse(url).query)["tenant"] == ["acme"]

    def test_special_characters_in_state_are_encoded(self):
        """Test that reserved characters in values are escaped."""
        # Arrange
        authorization = Authorization(
            client_id="abc",
            url="https://auth.example.com/authorize",
            redirect_uri="https://app.test/cb?next=/home",
            state="a&b=c d",
        )

        # Act
        url = authorization.build_authorization_url()
        query_params = parse_qs(urlparse(url).query)

        # Assert
        assert "state=a%26b%3Dc%20d" in url
        assert query_params["state"] == ["a&b=c d"]
        assert query_params["redirect_uri"] == ["https://app.test/cb?next=/home"]
