"""OAuth 2.0 error codes (RFC 6749 Sections 4.1.2.1 and 5.2).

Unrecognized codes are preserved as UnknownErrorCode so provider-specific
extensions stay visible to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ErrorCode(str, Enum):
    """Error codes defined by RFC 6749."""

    # Authorization endpoint (Section 4.1.2.1)
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    ACCESS_DENIED = "access_denied"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"

    # Token endpoint (Section 5.2)
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"


@dataclass(frozen=True)
class UnknownErrorCode:
    """Error code outside the RFC 6749 set, kept verbatim."""

    value: str


AnyErrorCode = Union[ErrorCode, UnknownErrorCode]


def parse_error_code(raw: str) -> AnyErrorCode:
    """Map a raw error string onto ErrorCode, falling back to UnknownErrorCode.

    Matching is exact; RFC 6749 error codes are case-sensitive.
    """
    try:
        return ErrorCode(raw)
    except ValueError:
        return UnknownErrorCode(raw)
