"""httpx S3 transport."""

import inspect
import logging
import ssl
from types import TracebackType
from typing import Self

import httpx

from asyncs3.exceptions import S3TransportClientException
from asyncs3.http.endpoint import Endpoint
from asyncs3.http.models import S3Response, SignedS3Request
from asyncs3.http.transports.abstract import ConnectionHandler

logger = logging.getLogger(__name__)


class HttpxS3Transport:
    """Transport on a pooled `httpx.AsyncClient`.

    Example:
        ```python
        transport = HttpxS3Transport(Endpoint.parse("http://localhost:9000"))
        response = await transport.send(signed_request)
        await transport.aclose()
        ```

    """

    def __init__(
        self,
        endpoint: Endpoint,
        timeout: float = 30.0,
        verify: bool | ssl.SSLContext = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            endpoint: The S3 endpoint every request is sent to.
            timeout: The timeout in seconds.
            verify: Whether TLS certificates are verified, or the SSL context to verify them with.
            transport: The underlying httpx transport. If None, the network transport is used.
                Pass an `httpx.MockTransport` to test without a server.

        """
        self._endpoint = endpoint
        self._connection_handlers: list[ConnectionHandler] = []
        self._client = httpx.AsyncClient(
            base_url=endpoint.base_url,
            timeout=timeout,
            verify=verify,
            transport=transport,
            event_hooks={"request": [self._on_request]},
        )

    @property
    def endpoint(self) -> Endpoint:
        """The endpoint requests are sent to."""
        return self._endpoint

    @property
    def is_closed(self) -> bool:
        """Whether the transport has been closed."""
        return self._client.is_closed

    def add_connection_handler(self, handler: ConnectionHandler) -> None:
        """Register an instrumentation hook called with every outgoing request."""
        self._connection_handlers.append(handler)

    async def _on_request(self, request: httpx.Request) -> None:
        for handler in self._connection_handlers:
            result = handler(request)
            if inspect.isawaitable(result):
                await result

    async def send(self, request: SignedS3Request) -> S3Response:
        """Send a signed request and read its response.

        Args:
            request: The signed request.

        Returns:
            The response, whatever its status code.

        Raises:
            S3TransportClientException: If the request can't be delivered or the response can't be read.

        """
        url = httpx.URL(self._endpoint.base_url + request.target)
        # httpx drops "." and ".." segments from URL paths; the target extension sends the signed path as is.
        http_request = self._client.build_request(
            request.method,
            url,
            headers=list(request.headers),
            content=request.content or None,
            extensions={"target": request.target.encode("ascii")},
        )

        try:
            response = await self._client.send(http_request)
        except (httpx.HTTPError, RuntimeError) as exc:
            msg = f"{request.method} {request.target} failed: {exc}"
            raise S3TransportClientException(msg) from exc

        logger.debug(f"{request.method} {request.target} -> {response.status_code}")

        return S3Response(status_code=response.status_code, headers=response.headers, content=response.content)

    async def aclose(self) -> None:
        """Close the client and its connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        """Enter the context manager."""
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None
    ) -> None:
        """Exit the context manager."""
        await self.aclose()
