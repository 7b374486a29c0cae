"""S3 client request builder.

A request accepts header, query and metadata changes until `finalize` is called. Finalizing
computes the payload hash and the timestamp headers, signs the request, hands it to the transport
and calls the response handler:

    BUILDING -> SIGNED -> DISPATCHED
        \\          \\
         +----------+--> FAILED
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Self

import httpx

from asyncs3.credentials.abstract import Credentials
from asyncs3.credentials.resolver import CredentialsResolver
from asyncs3.enums.base import BaseEnum
from asyncs3.exceptions import (
    S3AlreadySignedClientException,
    S3NoCredentialsFoundClientException,
    S3SigningFailureClientException,
    S3TransportClientException,
)
from asyncs3.http.models import S3Response, SignedS3Request, UserMetadata
from asyncs3.http.transports.abstract import AbstractS3Transport
from asyncs3.requests.handlers import FailureHandler, ResponseHandler, call_handler, log_and_drop
from asyncs3.signing.canonical import UNSIGNED_PAYLOAD, canonical_uri, payload_hash, query_string
from asyncs3.signing.context import SignatureScheme, SigningContext
from asyncs3.signing.engine import sign

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class RequestState(BaseEnum):
    """State of an S3 client request.

    Values:
        BUILDING: Headers, query parameters and metadata can still change.
        SIGNED: The Authorization header has been computed; the request is frozen.
        DISPATCHED: The transport has returned a response.
        FAILED: Reading the payload, resolving credentials, signing or sending failed.
    """

    BUILDING = "building"
    SIGNED = "signed"
    DISPATCHED = "dispatched"
    FAILED = "failed"


class S3ClientRequest:
    """One outgoing S3 request.

    Example:
        ```python
        request = S3ClientRequest("PUT", "bucket", "key", transport, resolver, host="s3.amazonaws.com")
        request.set_user_metadata(UserMetadata({"owner": "library"})).exception_handler(on_failure)
        response = await request.finalize(b"hello")
        ```

    """

    def __init__(
        self,
        method: str,
        bucket: str,
        key: str | None,
        transport: AbstractS3Transport,
        resolver: CredentialsResolver,
        host: str,
        region: str = "us-east-1",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the request.

        Args:
            method: The HTTP method.
            bucket: The bucket.
            key: The object key, or None for a bucket-level request.
            transport: The transport the signed request is sent with.
            resolver: The resolver credentials are taken from at finalize time.
            host: The Host header value.
            region: The region of the V4 credential scope.
            clock: Returns the signing time.

        """
        self._method = method.upper()
        self._bucket = bucket
        self._key = key
        self._transport = transport
        self._resolver = resolver
        self._host = host
        self._region = region
        self._clock = clock

        self._headers = httpx.Headers()
        self._query_params: list[tuple[str, str]] = []
        self._scheme = SignatureScheme.V4
        self._unsigned_payload = False

        self._state = RequestState.BUILDING
        self._finalizing = False
        self._signed_request: SignedS3Request | None = None

        self._response_handler: ResponseHandler | None = None
        self._failure_handler: FailureHandler = log_and_drop

    @property
    def state(self) -> RequestState:
        """The current state."""
        return self._state

    @property
    def method(self) -> str:
        """The HTTP method."""
        return self._method

    @property
    def path(self) -> str:
        """The decoded request path, /bucket or /bucket/key."""
        path = PATH_SEPARATOR + self._bucket
        if self._key is not None:
            path += PATH_SEPARATOR + self._key
        return path

    @property
    def headers(self) -> httpx.Headers:
        """A copy of the headers set so far."""
        return self._headers.copy()

    @property
    def query_params(self) -> list[tuple[str, str]]:
        """A copy of the query parameters set so far."""
        return list(self._query_params)

    @property
    def scheme(self) -> SignatureScheme:
        """The signature scheme."""
        return self._scheme

    @property
    def signed_request(self) -> SignedS3Request | None:
        """The signed request, once the request has been signed."""
        return self._signed_request

    def _ensure_building(self) -> None:
        if self._finalizing or self._state is not RequestState.BUILDING:
            raise S3AlreadySignedClientException(self._state)

    def put_header(self, name: str, value: str) -> Self:
        """Add a header. Repeated names keep every value.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        self._headers = httpx.Headers([*self._headers.multi_items(), (name, value)])
        return self

    def set_header(self, name: str, value: str) -> Self:
        """Set a header, replacing its previous values.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        self._headers[name] = value
        return self

    def add_query_param(self, name: str, value: str = "") -> Self:
        """Append a query parameter.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        self._query_params.append((name, value))
        return self

    def set_user_metadata(self, metadata: UserMetadata | None) -> Self:
        """Materialize user metadata as x-amz-meta-* headers, so that they are signed.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        if metadata is not None:
            for name, value in metadata.headers():
                self.set_header(name, value)
        return self

    def use_signature(self, scheme: SignatureScheme) -> Self:
        """Select the signature scheme.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        self._scheme = scheme
        return self

    def use_v2_signature(self, use_v2: bool) -> Self:
        """Select the legacy V2 scheme, or the V4 scheme when False."""
        return self.use_signature(SignatureScheme.V2 if use_v2 else SignatureScheme.V4)

    def unsigned_payload(self, unsigned: bool) -> Self:
        """Sign the V4 payload hash as UNSIGNED-PAYLOAD instead of hashing the body.

        Raises:
            S3AlreadySignedClientException: If the request is no longer being built.

        """
        self._ensure_building()
        self._unsigned_payload = unsigned
        return self

    def response_handler(self, handler: ResponseHandler | None) -> Self:
        """Set the handler called with the response."""
        self._response_handler = handler
        return self

    def exception_handler(self, handler: FailureHandler | None) -> Self:
        """Set the failure handler. None restores the default, which logs and drops the error."""
        self._failure_handler = handler or log_and_drop
        return self

    async def fail(self, exc: Exception) -> None:
        """Abort the request and deliver the error to the failure handler."""
        self._state = RequestState.FAILED
        logger.debug(f"{self._method} {self.path} failed: {exc}")
        await call_handler(self._failure_handler, exc)

    async def finalize(self, payload: bytes | bytearray | memoryview | None = None) -> S3Response | None:
        """Sign the request and send it.

        Args:
            payload: The body. None sends no body.

        Returns:
            The response, or None if the request failed and the failure handler was called.

        Raises:
            S3AlreadySignedClientException: If the request has already been finalized.

        """
        self._ensure_building()
        self._finalizing = True
        body = bytes(payload) if payload is not None else None

        try:
            credentials = await self._resolver.resolve()
            self._signed_request = self._sign(credentials, body)
        except (S3NoCredentialsFoundClientException, S3SigningFailureClientException) as exc:
            await self.fail(exc)
            return None

        self._state = RequestState.SIGNED

        try:
            response = await self._transport.send(self._signed_request)
        except S3TransportClientException as exc:
            await self.fail(exc)
            return None

        self._state = RequestState.DISPATCHED

        if self._response_handler is not None:
            await call_handler(self._response_handler, response)

        return response

    def _sign(self, credentials: Credentials, body: bytes | None) -> SignedS3Request:
        context = SigningContext(timestamp=self._clock(), region=self._region)
        headers = self._headers.copy()
        headers["host"] = self._host

        if body is not None:
            headers["content-length"] = str(len(body))

        if credentials.session_token:
            headers["x-amz-security-token"] = credentials.session_token

        match self._scheme:
            case SignatureScheme.V4:
                content_hash = UNSIGNED_PAYLOAD if self._unsigned_payload else payload_hash(body)
                headers["x-amz-date"] = context.amz_date
                headers["x-amz-content-sha256"] = content_hash
                headers["authorization"] = sign(
                    SignatureScheme.V4,
                    credentials,
                    context,
                    self._method,
                    self.path,
                    self._query_params,
                    headers,
                    content_hash,
                )
            case SignatureScheme.V2:
                if "date" not in headers:
                    headers["date"] = context.http_date
                headers["authorization"] = sign(
                    SignatureScheme.V2,
                    credentials,
                    context,
                    self._method,
                    canonical_uri(self.path),
                    self._query_params,
                    headers,
                )

        return SignedS3Request(
            method=self._method,
            path=canonical_uri(self.path),
            query=query_string(self._query_params),
            headers=tuple(headers.multi_items()),
            content=body or b"",
        )
