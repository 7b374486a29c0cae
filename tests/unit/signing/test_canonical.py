"""Test the canonicalization helpers."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from asyncs3.signing.canonical import (
    EMPTY_PAYLOAD_HASH,
    canonical_query_string,
    canonical_uri,
    grouped_headers,
    payload_hash,
    query_string,
    uri_encode,
)
from asyncs3.signing.context import SigningContext


class TestUriEncode:
    """Test the AWS percent-encoding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("AZaz09-_.~", "AZaz09-_.~"),
            ("a b", "a%20b"),
            ("a+b", "a%2Bb"),
            ("a/b", "a%2Fb"),
            ("$", "%24"),
            ("é", "%C3%A9"),
            ("*", "%2A"),
        ],
    )
    def test_encode(self, value: str, expected: str) -> None:
        """Test that unreserved characters are kept and the rest is encoded with upper-case hex."""
        assert uri_encode(value) == expected

    def test_keep_slash(self) -> None:
        """Test that slashes are kept on request."""
        assert uri_encode("a/b c", encode_slash=False) == "a/b%20c"

    def test_canonical_uri(self) -> None:
        """Test that paths keep their slashes and default to the root."""
        assert canonical_uri("/bucket/photos/my puppy.jpg") == "/bucket/photos/my%20puppy.jpg"
        assert canonical_uri("") == "/"


class TestQueryString:
    """Test the query strings."""

    def test_canonical_query_string_is_sorted(self) -> None:
        """Test that names are sorted, then values."""
        params = [("prefix", "b"), ("acl", ""), ("prefix", "a")]

        assert canonical_query_string(params) == "acl=&prefix=a&prefix=b"

    def test_wire_query_string_keeps_order(self) -> None:
        """Test that the wire form keeps the parameter order."""
        assert query_string([("list-type", "2"), ("prefix", "a b")]) == "list-type=2&prefix=a%20b"

    def test_empty(self) -> None:
        """Test that no parameters give an empty string."""
        assert canonical_query_string([]) == ""
        assert query_string([]) == ""


class TestHeaders:
    """Test the header grouping."""

    def test_grouped_headers(self) -> None:
        """Test that names are lower-cased, sorted, and repeated values joined in order."""
        headers = httpx.Headers([("X-B", "2"), ("x-a", " 1 "), ("X-B", "3")])

        assert grouped_headers(headers) == {"x-a": "1", "x-b": "2,3"}
        assert list(grouped_headers(headers)) == ["x-a", "x-b"]

    def test_grouped_headers_filter(self) -> None:
        """Test that only the wanted names are kept."""
        headers = httpx.Headers({"Host": "h", "Range": "bytes=0-1"})

        assert grouped_headers(headers, ["HOST"]) == {"host": "h"}


class TestPayloadHash:
    """Test the payload hash."""

    def test_empty(self) -> None:
        """Test the hash of an empty body."""
        assert EMPTY_PAYLOAD_HASH == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert payload_hash(None) == EMPTY_PAYLOAD_HASH
        assert payload_hash(b"") == EMPTY_PAYLOAD_HASH

    def test_body(self) -> None:
        """Test the hash of a body."""
        assert payload_hash(b"Welcome to Amazon S3.") == (
            "44ce7dd67c959e0d3524ffac1771dfbba87d2b6b4b4e99e42034a8b803f8b072"
        )

    def test_precomputed(self) -> None:
        """Test that strings are taken as precomputed hashes."""
        assert payload_hash("UNSIGNED-PAYLOAD") == "UNSIGNED-PAYLOAD"


class TestSigningContext:
    """Test the signing context."""

    def test_formats(self) -> None:
        """Test the timestamp formats and the credential scope."""
        context = SigningContext(timestamp=datetime(2013, 5, 24, 1, 2, 3), region="eu-west-1")

        assert context.amz_date == "20130524T010203Z"
        assert context.datestamp == "20130524"
        assert context.http_date == "Fri, 24 May 2013 01:02:03 GMT"
        assert context.credential_scope == "20130524/eu-west-1/s3/aws4_request"

    def test_converts_to_utc(self) -> None:
        """Test that aware timestamps are converted to UTC."""
        context = SigningContext(
            timestamp=datetime(2013, 5, 24, 2, 0, tzinfo=timezone(timedelta(hours=3))), region="us-east-1"
        )

        assert context.amz_date == "20130523T230000Z"
        assert context.datestamp == "20130523"
