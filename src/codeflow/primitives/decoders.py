"""Response decoder set for OAuth 2.0 token endpoint responses.

Decodes the JSON body of a token response (RFC 6749 Sections 5.1 and 5.2)
into AuthenticationSuccess or AuthenticationError. Every field has its own
decoder; each receives the raw JSON value of its key, or None when the key
is missing or null, and raises DecodeError when the value has the wrong
shape.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from codeflow.models.error_codes import AnyErrorCode, parse_error_code
from codeflow.models.errors import DecodeError
from codeflow.models.tokens import (
    AuthenticationError,
    AuthenticationResult,
    AuthenticationSuccess,
)

logger = logging.getLogger(__name__)

# Largest expires_in accepted; anything above is treated as overflow
MAX_EXPIRES_IN = 2**63 - 1

_SPACES = re.compile(r" +")
_SPACES_OR_COMMAS = re.compile(r"[ ,]+")


def decode_token(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise DecodeError("access_token must be a non-empty string", "access_token")
    return value


def decode_refresh_token(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("refresh_token must be a string", "refresh_token")
    return value or None


def decode_expires_in(value: Any) -> int | None:
    """Decode expires_in from a JSON number.

    Integral floats such as 3600.0 are accepted. Booleans, fractions,
    negative values and values above MAX_EXPIRES_IN are rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError("expires_in must be a number", "expires_in")
    if isinstance(value, float):
        if not value.is_integer():
            raise DecodeError("expires_in must be a whole number", "expires_in")
        value = int(value)
    if not 0 <= value <= MAX_EXPIRES_IN:
        raise DecodeError(f"expires_in out of range: {value}", "expires_in")
    return value


def decode_expires_in_lenient(value: Any) -> int | None:
    """Like decode_expires_in, but also accepts a decimal string."""
    if isinstance(value, str):
        if not value.isdecimal():
            raise DecodeError("expires_in must be a number", "expires_in")
        if len(value) > len(str(MAX_EXPIRES_IN)):
            raise DecodeError("expires_in out of range", "expires_in")
        value = int(value)
    return decode_expires_in(value)


def _split(value: str, separator: re.Pattern[str]) -> tuple[str, ...]:
    return tuple(token for token in separator.split(value) if token)


def decode_scope(value: Any) -> tuple[str, ...]:
    """Decode a space-delimited scope string (RFC 6749 Section 3.3)."""
    if value is None:
        return ()
    if not isinstance(value, str):
        raise DecodeError("scope must be a space-delimited string", "scope")
    return _split(value, _SPACES)


def decode_scope_lenient(value: Any) -> tuple[str, ...]:
    """Decode a scope given as a space or comma delimited string, or a list.

    Consecutive separators collapse and empty tokens are dropped, so
    "a,b c", "a b c" and ["a", "b", "c"] all decode to ("a", "b", "c").
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return _split(value, _SPACES_OR_COMMAS)
    if isinstance(value, list):
        if not all(isinstance(token, str) for token in value):
            raise DecodeError("scope list must contain only strings", "scope")
        return tuple(token for token in value if token)
    raise DecodeError("scope must be a string or a list of strings", "scope")


def decode_token_type(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("token_type must be a string", "token_type")
    return value


def decode_error(value: Any) -> AnyErrorCode:
    if not isinstance(value, str) or not value:
        raise DecodeError("error must be a non-empty string", "error")
    return parse_error_code(value)


def decode_error_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("error_description must be a string", "error_description")
    return value


def decode_error_uri(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError("error_uri must be a string", "error_uri")
    return value


@dataclass(frozen=True)
class DecoderSet:
    """Bundle of per-field decoders for token endpoint responses.

    JSON key names are fixed by RFC 6749; only the decoding of each key is
    configurable.
    """

    token: Callable[[Any], str] = decode_token
    refresh_token: Callable[[Any], str | None] = decode_refresh_token
    expires_in: Callable[[Any], int | None] = decode_expires_in
    scope: Callable[[Any], tuple[str, ...]] = decode_scope
    token_type: Callable[[Any], str | None] = decode_token_type
    error: Callable[[Any], AnyErrorCode] = decode_error
    error_description: Callable[[Any], str | None] = decode_error_description
    error_uri: Callable[[Any], str | None] = decode_error_uri


DEFAULT_DECODERS = DecoderSet()

LENIENT_DECODERS = DecoderSet(
    expires_in=decode_expires_in_lenient,
    scope=decode_scope_lenient,
)


def _load_json_object(body: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(body, Mapping):
        return body
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Token response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DecodeError("Token response must be a JSON object")
    return data


def decode_token_response(
    body: str | bytes | Mapping[str, Any],
    decoders: DecoderSet = DEFAULT_DECODERS,
) -> AuthenticationResult:
    """Decode a token endpoint response body.

    A body containing an "error" member is decoded as an error response
    (RFC 6749 Section 5.2); anything else must be a successful response.

    Args:
        body: Raw JSON response body, or an already parsed JSON object
        decoders: Per-field decoding strategies

    Returns:
        AuthenticationSuccess or AuthenticationError

    Raises:
        DecodeError: If the body is not a JSON object or a field is malformed
    """
    data = _load_json_object(body)

    try:
        if data.get("error") is not None:
            result: AuthenticationResult = AuthenticationError(
                error=decoders.error(data.get("error")),
                error_description=decoders.error_description(
                    data.get("error_description")
                ),
                error_uri=decoders.error_uri(data.get("error_uri")),
            )
            logger.warning(f"Token endpoint returned error: {result.error.value}")
            return result

        result = AuthenticationSuccess(
            token=decoders.token(data.get("access_token")),
            refresh_token=decoders.refresh_token(data.get("refresh_token")),
            expires_in=decoders.expires_in(data.get("expires_in")),
            scope=decoders.scope(data.get("scope")),
            token_type=decoders.token_type(data.get("token_type")),
        )
        logger.debug("Decoded successful token response")
        return result

    except ValidationError as e:
        raise DecodeError(f"Invalid token response format: {e}") from e
