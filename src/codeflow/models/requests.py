"""Token request descriptor.

Describes an HTTP request to the token endpoint without sending it. The
host transport executes it and hands the response body back to decode().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import urlencode

import httpx

from codeflow.models.tokens import AuthenticationResult
from codeflow.primitives.decoders import (
    DEFAULT_DECODERS,
    DecoderSet,
    decode_token_response,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class TokenRequestDescriptor:
    """Method, URL, headers and form body of a token endpoint request.

    form keeps insertion order so the encoded body is deterministic and
    headers are stored read-only.
    timeout is a hint for the transport and is not enforced here.
    """

    url: str
    form: tuple[tuple[str, str], ...]
    headers: Mapping[str, str]
    method: str = "POST"
    decoders: DecoderSet = field(default=DEFAULT_DECODERS, compare=False)
    timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def body(self) -> str:
        """application/x-www-form-urlencoded request body."""
        return urlencode(self.form)

    def form_data(self) -> dict[str, str]:
        return dict(self.form)

    def decode(self, body: str | bytes | Mapping[str, Any]) -> AuthenticationResult:
        """Decode the token endpoint response with this request's decoders."""
        return decode_token_response(body, self.decoders)

    def to_httpx_request(self) -> httpx.Request:
        """Convert to an unsent httpx.Request.

        The timeout hint, when set, travels as the httpx "timeout" extension.
        """
        extensions = {}
        if self.timeout is not None:
            extensions["timeout"] = httpx.Timeout(self.timeout).as_dict()

        return httpx.Request(
            self.method,
            self.url,
            headers=dict(self.headers),
            content=self.body.encode("ascii"),
            extensions=extensions,
        )
