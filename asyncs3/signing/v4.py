"""Current (V4) request signature."""

import hashlib
import hmac
from collections.abc import Iterable

import httpx

from asyncs3.credentials.abstract import Credentials
from asyncs3.signing.canonical import canonical_query_string, canonical_uri, grouped_headers, payload_hash
from asyncs3.signing.context import SCOPE_TERMINATOR, SigningContext

ALGORITHM = "AWS4-HMAC-SHA256"

# Headers that transports and proxies may add or rewrite after signing.
UNSIGNED_HEADERS = frozenset({"authorization", "connection", "content-length", "expect", "user-agent", "x-amzn-trace-id"})


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def signed_header_names(headers: httpx.Headers) -> list[str]:
    """Lower-cased, sorted names of the headers that take part in the signature."""
    return sorted({name.lower() for name in headers} - UNSIGNED_HEADERS)


def canonical_request(
    method: str,
    path: str,
    query_params: Iterable[tuple[str, str]],
    headers: httpx.Headers,
    payload: bytes | str | None,
) -> str:
    """Build the V4 canonical request.

    Args:
        method: The HTTP method.
        path: The decoded request path, e.g. /bucket/my key.
        query_params: The decoded query parameters.
        headers: The request headers. Every header except the unsigned ones is signed.
        payload: The body bytes, a precomputed payload hash or sentinel, or None for an empty body.

    Returns:
        The canonical request.

    """
    names = signed_header_names(headers)
    canonical_headers = "".join(f"{name}:{value}\n" for name, value in grouped_headers(headers, names).items())

    return "\n".join(
        [
            method.upper(),
            canonical_uri(path),
            canonical_query_string(query_params),
            canonical_headers,
            ";".join(names),
            payload_hash(payload),
        ]
    )


def string_to_sign(context: SigningContext, canonical: str) -> str:
    """Build the V4 string to sign from a canonical request."""
    return "\n".join(
        [
            ALGORITHM,
            context.amz_date,
            context.credential_scope,
            hashlib.sha256(canonical.encode("utf-8")).hexdigest(),
        ]
    )


def derive_signing_key(secret_key: str, context: SigningContext) -> bytes:
    """Derive the signing key.

    The chain is seeded with "AWS4" + secret key and runs through the date, region, service and
    "aws4_request", each HMAC-SHA256 output keying the next step.
    """
    date_key = _hmac(f"AWS4{secret_key}".encode(), context.datestamp)
    region_key = _hmac(date_key, context.region)
    service_key = _hmac(region_key, context.service)
    return _hmac(service_key, SCOPE_TERMINATOR)


def signature(secret_key: str, context: SigningContext, to_sign: str) -> str:
    """Compute the hex HMAC-SHA256 of the string to sign with the derived key."""
    return hmac.new(derive_signing_key(secret_key, context), to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def authorization(
    credentials: Credentials,
    context: SigningContext,
    method: str,
    path: str,
    query_params: Iterable[tuple[str, str]],
    headers: httpx.Headers,
    payload: bytes | str | None,
) -> str:
    """Compute the V4 Authorization header value.

    The session token must already be in `headers` as x-amz-security-token so that it is signed.
    """
    canonical = canonical_request(method, path, query_params, headers, payload)
    to_sign = string_to_sign(context, canonical)

    return (
        f"{ALGORITHM} "
        f"Credential={credentials.access_key}/{context.credential_scope}, "
        f"SignedHeaders={';'.join(signed_header_names(headers))}, "
        f"Signature={signature(credentials.secret_key, context, to_sign)}"
    )
