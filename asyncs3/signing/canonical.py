"""Canonicalization helpers shared by the signature schemes."""

import hashlib
from collections.abc import Iterable

import httpx

EMPTY_PAYLOAD_HASH = hashlib.sha256(b"").hexdigest()
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

_UNRESERVED = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~")


def uri_encode(value: str, *, encode_slash: bool = True) -> str:
    """Percent-encode a value with the AWS rules.

    Unreserved characters (A-Z, a-z, 0-9, -, _, ., ~) are kept, every other byte of the UTF-8
    encoding becomes %XX with upper-case hex. Slashes are kept when `encode_slash` is False.

    Args:
        value: The value to encode.
        encode_slash: Whether '/' is encoded.

    Returns:
        The encoded value.

    """
    result: list[str] = []
    for char in value:
        if char in _UNRESERVED or (char == "/" and not encode_slash):
            result.append(char)
        else:
            result.extend(f"%{byte:02X}" for byte in char.encode("utf-8"))
    return "".join(result)


def canonical_uri(path: str) -> str:
    """Encode a path for the V4 canonical request.

    S3 paths are encoded once, keeping the slashes.
    """
    return uri_encode(path or "/", encode_slash=False)


def canonical_query_string(params: Iterable[tuple[str, str]]) -> str:
    """Build the V4 canonical query string.

    Names and values are encoded, then sorted by name and value. A parameter without a value is
    written as ``name=``.
    """
    encoded = sorted((uri_encode(name), uri_encode(value)) for name, value in params)
    return "&".join(f"{name}={value}" for name, value in encoded)


def query_string(params: Iterable[tuple[str, str]]) -> str:
    """Build the query string sent on the wire, keeping the parameter order."""
    return "&".join(f"{uri_encode(name)}={uri_encode(value)}" for name, value in params)


def normalize_header_value(value: str) -> str:
    """Trim a header value and collapse its inner whitespace runs."""
    return " ".join(value.split())


def grouped_headers(headers: httpx.Headers, names: Iterable[str] | None = None) -> dict[str, str]:
    """Group header values by lower-cased name.

    Repeated headers are joined with commas in the order they were added.

    Args:
        headers: The headers.
        names: If given, only these (lower-cased) names are kept.

    Returns:
        The grouped headers, sorted by name.

    """
    wanted = None if names is None else {name.lower() for name in names}
    grouped: dict[str, list[str]] = {}

    for name, value in headers.multi_items():
        lower_name = name.lower()
        if wanted is not None and lower_name not in wanted:
            continue
        grouped.setdefault(lower_name, []).append(normalize_header_value(value))

    return {name: ",".join(grouped[name]) for name in sorted(grouped)}


def payload_hash(payload: bytes | str | None) -> str:
    """Hash a payload for the V4 canonical request.

    Args:
        payload: The body bytes, a precomputed hash or sentinel string, or None for an empty body.

    Returns:
        The hex SHA-256 of the body, or the given string.

    """
    if payload is None:
        return EMPTY_PAYLOAD_HASH
    if isinstance(payload, str):
        return payload
    return hashlib.sha256(payload).hexdigest()
