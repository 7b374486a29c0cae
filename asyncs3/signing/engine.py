"""Signature engine.

Single entry point over the two signature schemes:

    ```python
    value = sign(SignatureScheme.V4, credentials, context, "GET", "/bucket/key", [], headers, None)
    ```

"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import assert_never

import httpx

from asyncs3.credentials.abstract import Credentials
from asyncs3.exceptions import S3SigningFailureClientException
from asyncs3.signing import v2, v4
from asyncs3.signing.context import SignatureScheme, SigningContext

logger = logging.getLogger(__name__)

_V4_AUTHORIZATION_RE = re.compile(
    r"AWS4-HMAC-SHA256\s+"
    r"Credential=(?P<access_key>[^/]+)/(?P<scope>[^,]+),\s*"
    r"SignedHeaders=(?P<signed_headers>[^,]+),\s*"
    r"Signature=(?P<signature>[0-9a-f]+)"
)
_V2_AUTHORIZATION_RE = re.compile(r"AWS\s+(?P<access_key>[^:]+):(?P<signature>\S+)")


@dataclass(frozen=True)
class ParsedAuthorization:
    """Parsed Authorization header value.

    Attributes:
        scheme: The signature scheme.
        access_key: The access key the request was signed with.
        signature: The signature.
        scope: The V4 credential scope, None for V2.
        signed_headers: The V4 signed header names, empty for V2.

    """

    scheme: SignatureScheme
    access_key: str
    signature: str
    scope: str | None = None
    signed_headers: tuple[str, ...] = ()

    @property
    def region(self) -> str | None:
        """The region of the V4 credential scope."""
        if self.scope is None:
            return None
        return self.scope.split("/")[1]


def parse_authorization(value: str) -> ParsedAuthorization | None:
    """Parse an Authorization header value.

    Args:
        value: The header value.

    Returns:
        The parsed value, or None if it's neither a V2 nor a V4 signature.

    """
    if match := _V4_AUTHORIZATION_RE.fullmatch(value.strip()):
        return ParsedAuthorization(
            scheme=SignatureScheme.V4,
            access_key=match.group("access_key"),
            signature=match.group("signature"),
            scope=match.group("scope"),
            signed_headers=tuple(match.group("signed_headers").split(";")),
        )

    if match := _V2_AUTHORIZATION_RE.fullmatch(value.strip()):
        return ParsedAuthorization(
            scheme=SignatureScheme.V2,
            access_key=match.group("access_key"),
            signature=match.group("signature"),
        )

    return None


def sign(
    scheme: SignatureScheme,
    credentials: Credentials,
    context: SigningContext,
    method: str,
    path: str,
    query_params: Iterable[tuple[str, str]],
    headers: httpx.Headers | Mapping[str, str],
    payload: bytes | str | None = None,
) -> str:
    """Compute the Authorization header value of a request.

    The function is pure: the same inputs, including the context timestamp, always give the same value.

    Args:
        scheme: The signature scheme.
        credentials: The credentials to sign with.
        context: The signing time, region and service.
        method: The HTTP method.
        path: The request path. V4 encodes it; V2 uses it as given.
        query_params: The query parameters.
        headers: The request headers, including the timestamp headers set at finalize time.
        payload: The body bytes, a precomputed payload hash or sentinel, or None for an empty body.
            Only V4 uses it.

    Returns:
        The Authorization header value.

    Raises:
        S3SigningFailureClientException: If the request can't be canonicalized or signed.

    """
    params = list(query_params)
    request_headers = headers if isinstance(headers, httpx.Headers) else httpx.Headers(headers)

    try:
        match scheme:
            case SignatureScheme.V2:
                value = v2.authorization(credentials, context, method, path, params, request_headers)
            case SignatureScheme.V4:
                value = v4.authorization(credentials, context, method, path, params, request_headers, payload)
            case _:
                assert_never(scheme)
    except (TypeError, ValueError, UnicodeError) as exc:
        msg = f"Failed to sign {method} {path} with the {scheme} scheme: {exc}"
        raise S3SigningFailureClientException(msg) from exc

    logger.debug(f"Signed {method} {path} with the {scheme} scheme")

    return value
