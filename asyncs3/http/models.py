"""Requests and responses exchanged with the transport."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

import httpx

USER_METADATA_PREFIX = "x-amz-meta-"


class UserMetadata(Mapping[str, str]):
    """User metadata of an S3 object.

    Names are case-insensitive and stored lower-cased. They are sent as ``x-amz-meta-<name>`` headers.

    Example:
        ```python
        metadata = UserMetadata({"Owner": "library"})
        metadata.headers()  # [("x-amz-meta-owner", "library")]
        ```

    """

    def __init__(self, entries: Mapping[str, str] | Iterable[tuple[str, str]] = ()) -> None:
        """Initialize the metadata.

        Args:
            entries: The metadata names and values.

        """
        items = entries.items() if isinstance(entries, Mapping) else entries
        self._entries: dict[str, str] = {}
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> "UserMetadata":
        """Add an entry, replacing the value of an existing name."""
        name = name.strip().lower()
        if name.startswith(USER_METADATA_PREFIX):
            name = name.removeprefix(USER_METADATA_PREFIX)
        if not name:
            msg = "User metadata name can't be empty."
            raise ValueError(msg)
        if not (name.isascii() and value.isascii()):
            msg = f"User metadata must be US-ASCII, got {name!r}: {value!r}."
            raise ValueError(msg)

        self._entries[name] = value
        return self

    def headers(self) -> list[tuple[str, str]]:
        """The entries as prefixed header pairs."""
        return [(USER_METADATA_PREFIX + name, value) for name, value in self._entries.items()]

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> "UserMetadata":
        """Collect the x-amz-meta-* headers of a response."""
        metadata = cls()
        for name, value in headers.multi_items():
            if name.lower().startswith(USER_METADATA_PREFIX):
                metadata._entries[name.lower().removeprefix(USER_METADATA_PREFIX)] = value
        return metadata

    def __getitem__(self, name: str) -> str:
        return self._entries[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"UserMetadata({self._entries!r})"


@dataclass(frozen=True)
class SignedS3Request:
    """A signed request, ready for the transport.

    Attributes:
        method: The HTTP method.
        path: The percent-encoded path, e.g. /bucket/my%20key.
        query: The percent-encoded query string without the leading "?".
        headers: The header pairs, Authorization included.
        content: The body.

    """

    method: str
    path: str
    query: str
    headers: tuple[tuple[str, str], ...]
    content: bytes = b""

    @property
    def target(self) -> str:
        """The request target, path and query."""
        return f"{self.path}?{self.query}" if self.query else self.path


@dataclass(frozen=True)
class S3Response:
    """A response of the S3 service.

    Attributes:
        status_code: The HTTP status code.
        headers: The response headers.
        content: The response body. Empty for HEAD requests.

    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""

    @property
    def is_success(self) -> bool:
        """Whether the status code is 2xx."""
        return 200 <= self.status_code < 300  # noqa: PLR2004

    @property
    def user_metadata(self) -> UserMetadata:
        """The user metadata returned with the object."""
        return UserMetadata.from_headers(self.headers)

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.content.decode("utf-8")
