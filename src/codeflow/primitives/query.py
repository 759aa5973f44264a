"""Query parser set for OAuth 2.0 authorization redirects.

Each parser is a pure function over the parsed query of a redirect URL.
The code and error parsers run first; the detail parsers run second, keyed
by the value the first pass extracted. A caller wanting different field
names or stricter validation swaps the whole QueryParserSet, or single
parsers via dataclasses.replace().
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

from codeflow.models.error_codes import AnyErrorCode, parse_error_code
from codeflow.models.errors import AuthorizationResponseError
from codeflow.models.flow import AuthorizationError, AuthorizationSuccess
from codeflow.primitives.security import (
    is_valid_error_description,
    is_valid_error_uri,
    is_valid_state,
)

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Sequence[str]]

CodeParser = Callable[[QueryParams], str | None]
ErrorParser = Callable[[QueryParams], AnyErrorCode | None]
SuccessParser = Callable[[str, QueryParams], AuthorizationSuccess | None]
ErrorDetailParser = Callable[[AnyErrorCode, QueryParams], AuthorizationError | None]


def parse_query(url: str) -> dict[str, list[str]]:
    """Extract the query parameters of a URL, ignoring path and fragment.

    Blank values are kept so that `state=` is distinguishable from a
    missing state.
    """
    return parse_qs(urlsplit(url).query, keep_blank_values=True)


def get_single_param(params: QueryParams, key: str) -> str | None:
    """Return the first value of a query parameter, or None if absent."""
    values = params.get(key, [])
    return values[0] if values else None


def parse_code(params: QueryParams) -> str | None:
    # An empty code cannot be exchanged, treat it as absent
    return get_single_param(params, "code") or None


def parse_error(params: QueryParams) -> AnyErrorCode | None:
    raw = get_single_param(params, "error")
    if not raw:
        return None
    return parse_error_code(raw)


def parse_authorization_success(
    code: str, params: QueryParams
) -> AuthorizationSuccess | None:
    return AuthorizationSuccess(code=code, state=get_single_param(params, "state"))


def parse_authorization_error(
    error: AnyErrorCode, params: QueryParams
) -> AuthorizationError | None:
    """Build the error response from its optional fields.

    Character ranges of error_description and error_uri are not checked;
    see STRICT_QUERY_PARSERS for the validating variant.
    """
    return AuthorizationError(
        error=error,
        error_description=get_single_param(params, "error_description"),
        error_uri=get_single_param(params, "error_uri"),
        state=get_single_param(params, "state"),
    )


def _checked_param(
    params: QueryParams, key: str, is_valid: Callable[[str], bool]
) -> str | None:
    value = get_single_param(params, key)
    if value is not None and not is_valid(value):
        logger.warning(f"Rejecting redirect with malformed {key} parameter")
        raise AuthorizationResponseError(
            f"Query parameter {key!r} contains characters not permitted by RFC 6749"
        )
    return value


def parse_authorization_success_strict(
    code: str, params: QueryParams
) -> AuthorizationSuccess | None:
    return AuthorizationSuccess(
        code=code, state=_checked_param(params, "state", is_valid_state)
    )


def parse_authorization_error_strict(
    error: AnyErrorCode, params: QueryParams
) -> AuthorizationError | None:
    """Build the error response, rejecting out-of-range optional fields.

    Raises:
        AuthorizationResponseError: If state, error_description or
            error_uri violate RFC 6749 Appendix A
    """
    return AuthorizationError(
        error=error,
        error_description=_checked_param(
            params, "error_description", is_valid_error_description
        ),
        error_uri=_checked_param(params, "error_uri", is_valid_error_uri),
        state=_checked_param(params, "state", is_valid_state),
    )


@dataclass(frozen=True)
class QueryParserSet:
    """Bundle of parsing strategies applied to a redirect query."""

    code_parser: CodeParser = parse_code
    error_parser: ErrorParser = parse_error
    authorization_success_parser: SuccessParser = parse_authorization_success
    authorization_error_parser: ErrorDetailParser = parse_authorization_error


DEFAULT_QUERY_PARSERS = QueryParserSet()

STRICT_QUERY_PARSERS = QueryParserSet(
    authorization_success_parser=parse_authorization_success_strict,
    authorization_error_parser=parse_authorization_error_strict,
)
