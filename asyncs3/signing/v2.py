"""Legacy (V2) request signature.

The string to sign is::

    VERB\\n
    Content-MD5\\n
    Content-Type\\n
    Date\\n
    CanonicalizedAmzHeaders
    CanonicalizedResource

and the signature is the base64 of its HMAC-SHA1 keyed with the secret key.
"""

import base64
import hashlib
import hmac
from collections.abc import Iterable
from operator import itemgetter

import httpx

from asyncs3.credentials.abstract import Credentials
from asyncs3.signing.canonical import grouped_headers
from asyncs3.signing.context import SigningContext

ALGORITHM = "AWS"
AMZ_HEADER_PREFIX = "x-amz-"
SECURITY_TOKEN_HEADER = "x-amz-security-token"

SUB_RESOURCES = frozenset(
    {
        "accelerate",
        "acl",
        "analytics",
        "cors",
        "defaultObjectAcl",
        "delete",
        "inventory",
        "lifecycle",
        "location",
        "logging",
        "metrics",
        "notification",
        "object-lock",
        "partNumber",
        "policy",
        "replication",
        "requestPayment",
        "response-cache-control",
        "response-content-disposition",
        "response-content-encoding",
        "response-content-language",
        "response-content-type",
        "response-expires",
        "restore",
        "select",
        "select-type",
        "storageClass",
        "tagging",
        "torrent",
        "uploadId",
        "uploads",
        "versionId",
        "versioning",
        "versions",
        "website",
    }
)


def canonical_amz_headers(headers: httpx.Headers) -> str:
    """Build the canonicalized x-amz-* block, one ``name:value\\n`` line per header.

    The security token is not part of the V2 signature material.
    """
    amz_headers = {
        name: value
        for name, value in grouped_headers(headers).items()
        if name.startswith(AMZ_HEADER_PREFIX) and name != SECURITY_TOKEN_HEADER
    }
    return "".join(f"{name}:{value}\n" for name, value in amz_headers.items())


def canonical_resource(path: str, query_params: Iterable[tuple[str, str]]) -> str:
    """Build the canonicalized resource.

    Args:
        path: The request path, e.g. /bucket/key, as sent on the wire.
        query_params: The query parameters. Only the sub-resources are kept.

    Returns:
        The path followed by the sorted sub-resources, e.g. /bucket/key?acl&versionId=3.

    """
    sub_resources = sorted(
        ((name, value) for name, value in query_params if name in SUB_RESOURCES), key=itemgetter(0)
    )
    if not sub_resources:
        return path or "/"

    return (path or "/") + "?" + "&".join(f"{name}={value}" if value else name for name, value in sub_resources)


def string_to_sign(
    context: SigningContext,
    method: str,
    path: str,
    query_params: Iterable[tuple[str, str]],
    headers: httpx.Headers,
) -> str:
    """Build the V2 string to sign.

    The date line is empty when x-amz-date is set, otherwise it's the Date header or,
    failing that, the context timestamp.
    """
    if "x-amz-date" in headers:
        date = ""
    else:
        date = headers.get("date", context.http_date)

    return "\n".join(
        [
            method.upper(),
            headers.get("content-md5", ""),
            headers.get("content-type", ""),
            date,
            canonical_amz_headers(headers) + canonical_resource(path, query_params),
        ]
    )


def signature(secret_key: str, to_sign: str) -> str:
    """Compute the base64 HMAC-SHA1 of the string to sign."""
    digest = hmac.new(secret_key.encode("utf-8"), to_sign.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def authorization(
    credentials: Credentials,
    context: SigningContext,
    method: str,
    path: str,
    query_params: Iterable[tuple[str, str]],
    headers: httpx.Headers,
) -> str:
    """Compute the V2 Authorization header value, ``AWS <access key>:<signature>``."""
    to_sign = string_to_sign(context, method, path, list(query_params), headers)
    return f"{ALGORITHM} {credentials.access_key}:{signature(credentials.secret_key, to_sign)}"
