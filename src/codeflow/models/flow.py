"""Authorization flow models for the OAuth 2.0 authorization code grant.

Contains the authorization request configuration and the three possible
outcomes of parsing the provider's redirect back to the client.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from codeflow.models.error_codes import AnyErrorCode


@dataclass(frozen=True)
class Authorization:
    """Authorization request parameters (RFC 6749 Section 4.1.1).

    Immutable configuration created by the host before starting a flow.
    The state value should be unguessable; see generate_state().
    """

    client_id: str
    url: str
    redirect_uri: str
    scope: Sequence[str] = field(default=())
    state: str | None = None

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ValueError("client_id must be a non-empty string")
        if isinstance(self.scope, str):
            raise TypeError("scope must be a sequence of strings, not a string")
        object.__setattr__(self, "scope", tuple(self.scope))

    def query_params(self) -> dict[str, str]:
        """Query parameters for the authorization endpoint, in send order."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }

        if self.scope:
            params["scope"] = " ".join(self.scope)
        if self.state is not None:
            params["state"] = self.state

        return params

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL.

        Values are percent-encoded with %20 for spaces. A query already
        present on the endpoint URL is kept ahead of the OAuth parameters.
        """
        parts = urlsplit(self.url)
        query = urlencode(self.query_params(), safe="", quote_via=quote)
        if parts.query:
            query = f"{parts.query}&{query}"
        return urlunsplit(
            (parts.scheme, parts.netloc, parts.path, query, parts.fragment)
        )


@dataclass(frozen=True)
class AuthorizationSuccess:
    """Successful authorization response (RFC 6749 Section 4.1.2)."""

    code: str
    state: str | None = None


@dataclass(frozen=True)
class AuthorizationError:
    """Error authorization response (RFC 6749 Section 4.1.2.1)."""

    error: AnyErrorCode
    error_description: str | None = None
    error_uri: str | None = None
    state: str | None = None


@dataclass(frozen=True)
class AuthorizationEmpty:
    """Redirect carried no recognizable OAuth response parameters."""


AuthorizationResult = Union[AuthorizationEmpty, AuthorizationError, AuthorizationSuccess]
