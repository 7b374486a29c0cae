"""Non-blocking S3 client."""

import logging
import ssl
from collections.abc import AsyncIterable, Callable
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Self

from opentelemetry import trace

from asyncs3.configs.s3 import DEFAULT_REGION, S3ClientConfig
from asyncs3.credentials.abstract import Credentials
from asyncs3.credentials.resolver import CredentialsResolver
from asyncs3.http.endpoint import Endpoint
from asyncs3.http.models import S3Response, UserMetadata
from asyncs3.http.transports.abstract import AbstractS3Transport, ConnectionHandler
from asyncs3.http.transports.httpx import HttpxS3Transport
from asyncs3.requests.builder import S3ClientRequest, utc_now
from asyncs3.requests.handlers import FailureHandler, ResponseHandler
from asyncs3.requests.sources import DEFAULT_CHUNK_SIZE, file_source
from asyncs3.requests.uploader import StreamingUploader
from asyncs3.signing.context import SignatureScheme

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

LIST_TYPE = "list-type"
LIST_TYPE_V2 = "2"
PREFIX = "prefix"


class S3Client:
    """Non-blocking S3 client.

    Every operation accepts an optional response handler and an optional failure handler, sync or
    async. Without a failure handler, errors are logged and dropped. Operations return the response,
    or None when they failed.

    Example:
        ```python
        async with S3Client(endpoint="http://localhost:9000", credentials=Credentials("key", "secret")) as client:
            await client.put("bucket", "hello.txt", b"hello", metadata=UserMetadata({"lang": "en"}))
            response = await client.get("bucket", "hello.txt")
        ```

    """

    def __init__(
        self,
        endpoint: Endpoint | str | None = None,
        credentials: Credentials | None = None,
        region: str = DEFAULT_REGION,
        resolver: CredentialsResolver | None = None,
        transport: AbstractS3Transport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: The S3 endpoint. Defaults to https://s3.amazonaws.com.
            credentials: Explicit credentials. They are pinned for the client lifetime.
            region: The region of the V4 credential scope.
            resolver: The credentials resolver. If None, the default chain is used.
            transport: The transport. If None, an httpx transport to the endpoint is created.
            clock: Returns the signing time.

        Raises:
            S3MalformedEndpointClientException: If the endpoint URL is invalid.

        """
        if isinstance(endpoint, Endpoint):
            self._endpoint = endpoint
        else:
            self._endpoint = Endpoint.parse(endpoint) if endpoint is not None else Endpoint.default()

        self._resolver = resolver or CredentialsResolver.default(credentials)
        self._transport = transport or HttpxS3Transport(self._endpoint)
        self._region = region
        self._clock = clock
        self._scheme = SignatureScheme.V4
        self._unsigned_payload = False

    @classmethod
    def from_config(
        cls, config: S3ClientConfig | None = None, transport: AbstractS3Transport | None = None
    ) -> Self:
        """Create a client from settings.

        Args:
            config: The settings. If None, they are read from the environment.
            transport: The transport. If None, an httpx transport is created from the settings.

        Returns:
            The client.

        """
        config = config or S3ClientConfig()
        endpoint = Endpoint.parse(config.endpoint_url)

        if transport is None:
            verify: bool | ssl.SSLContext = config.verify
            if config.verify and config.ca_bundle is not None:
                verify = ssl.create_default_context(cafile=str(config.ca_bundle))
            transport = HttpxS3Transport(endpoint, timeout=config.timeout, verify=verify)

        credentials = Credentials.from_parts(config.access_key_id, config.secret_access_key, config.session_token)
        client = cls(
            endpoint=endpoint,
            region=config.region,
            resolver=CredentialsResolver.default(credentials, config),
            transport=transport,
        )
        client.use_v2_signature(config.use_v2_signature)
        client.use_unsigned_payload(config.unsigned_payload)
        return client

    @property
    def endpoint(self) -> Endpoint:
        """The S3 endpoint."""
        return self._endpoint

    @property
    def resolver(self) -> CredentialsResolver:
        """The credentials resolver."""
        return self._resolver

    def use_v2_signature(self, use_v2: bool) -> Self:
        """Sign the requests of this client with the legacy V2 scheme, or V4 when False."""
        self._scheme = SignatureScheme.V2 if use_v2 else SignatureScheme.V4
        return self

    def uses_v2_signature(self) -> bool:
        """Whether the client signs with the legacy V2 scheme."""
        return self._scheme is SignatureScheme.V2

    def use_unsigned_payload(self, unsigned: bool) -> Self:
        """Skip V4 payload hashing for the requests of this client."""
        self._unsigned_payload = unsigned
        return self

    def connection_handler(self, handler: ConnectionHandler) -> Self:
        """Register an instrumentation hook called with every outgoing request."""
        self._transport.add_connection_handler(handler)
        return self

    def create_request(self, method: str, bucket: str, key: str | None = None) -> S3ClientRequest:
        """Create a request carrying the client signature settings.

        Args:
            method: The HTTP method.
            bucket: The bucket.
            key: The object key, or None for a bucket-level request.

        Returns:
            A request in the BUILDING state.

        """
        return (
            S3ClientRequest(
                method,
                bucket,
                key,
                transport=self._transport,
                resolver=self._resolver,
                host=self._endpoint.netloc,
                region=self._region,
                clock=self._clock,
            )
            .use_signature(self._scheme)
            .unsigned_payload(self._unsigned_payload)
        )

    async def head(
        self,
        bucket: str,
        key: str,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
    ) -> S3Response | None:
        """Perform a HEAD request on an object.

        Args:
            bucket: The bucket.
            key: The object key.
            on_response: Called with the response.
            on_failure: Called with the error. Defaults to logging it.

        Returns:
            The response, or None if the request failed.

        """
        with tracer.start_as_current_span("s3.head"):
            request = self.create_request("HEAD", bucket, key)
            return await self._dispatch(request, on_response, on_failure)

    async def get(
        self,
        bucket: str,
        key: str,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
    ) -> S3Response | None:
        """Get an object.

        Args:
            bucket: The bucket.
            key: The object key.
            on_response: Called with the response.
            on_failure: Called with the error. Defaults to logging it.

        Returns:
            The response, or None if the request failed.

        """
        with tracer.start_as_current_span("s3.get"):
            request = self.create_request("GET", bucket, key)
            return await self._dispatch(request, on_response, on_failure)

    async def list(
        self,
        bucket: str,
        prefix: str | None = None,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
    ) -> S3Response | None:
        """List the objects of a bucket (ListObjectsV2).

        The XML body of the response is returned as is.

        Args:
            bucket: The bucket.
            prefix: If given, only keys starting with it are listed.
            on_response: Called with the response.
            on_failure: Called with the error. Defaults to logging it.

        Returns:
            The response, or None if the request failed.

        """
        with tracer.start_as_current_span("s3.list"):
            request = self.create_request("GET", bucket).add_query_param(LIST_TYPE, LIST_TYPE_V2)
            if prefix is not None:
                request.add_query_param(PREFIX, prefix)
            return await self._dispatch(request, on_response, on_failure)

    async def put(
        self,
        bucket: str,
        key: str,
        payload: bytes | AsyncIterable[bytes],
        metadata: UserMetadata | None = None,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
    ) -> S3Response | None:
        """Upload an object from a buffer or an async byte source.

        A byte source is drained into memory before the request is signed.

        Args:
            bucket: The bucket.
            key: The object key.
            payload: The object content, or a source yielding it.
            metadata: User metadata stored with the object.
            on_response: Called with the response.
            on_failure: Called with the error. Defaults to logging it.

        Returns:
            The response, or None if the upload failed.

        """
        with tracer.start_as_current_span("s3.put"):
            request = self.create_request("PUT", bucket, key).set_user_metadata(metadata)
            request.response_handler(on_response).exception_handler(on_failure)

            if isinstance(payload, bytes | bytearray | memoryview):
                return await request.finalize(payload)

            return await StreamingUploader(request).upload(payload)

    async def put_file(
        self,
        bucket: str,
        key: str,
        path: Path | str,
        metadata: UserMetadata | None = None,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> S3Response | None:
        """Upload a local file.

        Args:
            bucket: The bucket.
            key: The object key.
            path: The file to upload.
            metadata: User metadata stored with the object.
            on_response: Called with the response.
            on_failure: Called with the error, including file read errors. Defaults to logging it.
            chunk_size: The size of the chunks the file is read in.

        Returns:
            The response, or None if the upload failed.

        """
        return await self.put(
            bucket,
            key,
            file_source(path, chunk_size),
            metadata=metadata,
            on_response=on_response,
            on_failure=on_failure,
        )

    async def delete(
        self,
        bucket: str,
        key: str,
        on_response: ResponseHandler | None = None,
        on_failure: FailureHandler | None = None,
    ) -> S3Response | None:
        """Delete an object.

        Args:
            bucket: The bucket.
            key: The object key.
            on_response: Called with the response.
            on_failure: Called with the error. Defaults to logging it.

        Returns:
            The response, or None if the request failed.

        """
        with tracer.start_as_current_span("s3.delete"):
            request = self.create_request("DELETE", bucket, key)
            return await self._dispatch(request, on_response, on_failure)

    async def _dispatch(
        self,
        request: S3ClientRequest,
        on_response: ResponseHandler | None,
        on_failure: FailureHandler | None,
    ) -> S3Response | None:
        request.response_handler(on_response).exception_handler(on_failure)
        return await request.finalize()

    async def aclose(self) -> None:
        """Close the transport. Requests still in flight fail through their failure handlers."""
        await self._transport.aclose()

    async def __aenter__(self) -> Self:
        """Enter the context manager."""
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None
    ) -> None:
        """Exit the context manager."""
        await self.aclose()
