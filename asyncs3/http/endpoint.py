"""S3 endpoint."""

from dataclasses import dataclass
from typing import Self

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from asyncs3.configs.s3 import DEFAULT_ENDPOINT
from asyncs3.exceptions import S3MalformedEndpointClientException

DEFAULT_PORTS = {"https": 443, "http": 80}

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


@dataclass(frozen=True)
class Endpoint:
    """Scheme, host and port of an S3 service.

    Attributes:
        scheme: "http" or "https".
        host: The host name.
        port: The port. Defaults to 443 for https and 80 for http.

    """

    scheme: str
    host: str
    port: int

    @property
    def ssl(self) -> bool:
        """Whether the endpoint uses TLS."""
        return self.scheme == "https"

    @property
    def netloc(self) -> str:
        """The host, followed by the port when it isn't the scheme default."""
        if self.port == DEFAULT_PORTS[self.scheme]:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def base_url(self) -> str:
        """The URL of the endpoint root."""
        return f"{self.scheme}://{self.netloc}"

    @classmethod
    def parse(cls, url: str | AnyHttpUrl) -> Self:
        """Parse an endpoint URL.

        Args:
            url: The endpoint URL, e.g. https://s3.amazonaws.com or http://localhost:9000.

        Returns:
            The endpoint. An explicit port overrides the scheme default.

        Raises:
            S3MalformedEndpointClientException: If the URL isn't an http(s) URL with a host.

        """
        try:
            parsed = url if isinstance(url, AnyHttpUrl) else _URL_ADAPTER.validate_python(url)
        except ValidationError as exc:
            msg = f"Malformed S3 endpoint {url!r}: {exc.errors()[0]['msg']}"
            raise S3MalformedEndpointClientException(msg) from exc

        if not parsed.host:
            msg = f"Malformed S3 endpoint {url!r}: missing host"
            raise S3MalformedEndpointClientException(msg)

        return cls(scheme=parsed.scheme, host=parsed.host, port=parsed.port or DEFAULT_PORTS[parsed.scheme])

    @classmethod
    def default(cls) -> Self:
        """The public AWS endpoint over TLS on port 443."""
        return cls.parse(DEFAULT_ENDPOINT)
