"""Abstract S3 transport."""

from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx

from asyncs3.http.models import S3Response, SignedS3Request

type ConnectionHandler = Callable[[httpx.Request], Awaitable[None] | None]


class AbstractS3Transport(Protocol):
    """Transport delivering signed requests to the S3 service."""

    async def send(self, request: SignedS3Request) -> S3Response:
        """Send a signed request and read its response.

        Args:
            request: The signed request.

        Returns:
            The response, whatever its status code.

        Raises:
            S3TransportClientException: If the request can't be delivered or the response can't be read.

        """
        ...

    def add_connection_handler(self, handler: ConnectionHandler) -> None:
        """Register an instrumentation hook called with every outgoing request."""
        ...

    async def aclose(self) -> None:
        """Close the transport and its connections."""
        ...
