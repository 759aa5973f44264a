"""Token exchange models for the OAuth 2.0 authorization code grant.

Contains client credentials, token request configuration and the decoded
token endpoint responses (RFC 6749 Sections 4.1.3, 5.1 and 5.2).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from codeflow.models.error_codes import AnyErrorCode


class Credentials(BaseModel):
    """OAuth 2.0 client credentials.

    A secret makes this a confidential client: token requests then carry an
    HTTP Basic Authorization header.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    secret: str | None = None  # None for public clients

    def is_confidential(self) -> bool:
        return self.secret is not None


@dataclass(frozen=True)
class Authentication:
    """Authorization code exchange parameters (RFC 6749 Section 4.1.3).

    redirect_uri must be identical to the one sent in the Authorization
    request; the token endpoint compares them verbatim.
    """

    credentials: Credentials
    code: str
    redirect_uri: str
    url: str


@dataclass(frozen=True)
class RefreshAuthentication:
    """Refresh token request parameters (RFC 6749 Section 6)."""

    credentials: Credentials
    refresh_token: str
    url: str
    scope: Sequence[str] = field(default=())

    def __post_init__(self) -> None:
        if isinstance(self.scope, str):
            raise TypeError("scope must be a sequence of strings, not a string")
        object.__setattr__(self, "scope", tuple(self.scope))


class AuthenticationSuccess(BaseModel):
    """Successful token response (RFC 6749 Section 5.1).

    scope is reported exactly as decoded. An empty scope means the server
    did not list one; substituting the requested scope is up to the caller.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_in: int | None = Field(default=None, ge=0)
    scope: tuple[str, ...] = ()
    token_type: str | None = None


class AuthenticationError(BaseModel):
    """Error token response (RFC 6749 Section 5.2)."""

    model_config = ConfigDict(frozen=True)

    error: AnyErrorCode
    error_description: str | None = None
    error_uri: str | None = None


AuthenticationResult = Union[AuthenticationSuccess, AuthenticationError]
