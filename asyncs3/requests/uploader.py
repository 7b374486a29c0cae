"""Streaming uploader."""

import logging
from collections.abc import AsyncIterable

from asyncs3.exceptions import S3UploadStreamClientException
from asyncs3.http.models import S3Response
from asyncs3.requests.builder import S3ClientRequest

logger = logging.getLogger(__name__)

CONTENT_LENGTH = "Content-Length"


class StreamingUploader:
    """Drains an async byte source into a request.

    Chunks are appended to one buffer as they arrive. At the end of the source the buffer length
    becomes the Content-Length and the request is finalized with the buffer, once. The whole payload
    is held in memory before signing.

    Example:
        ```python
        response = await StreamingUploader(request).upload(file_source("photo.jpg"))
        ```

    """

    def __init__(self, request: S3ClientRequest) -> None:
        """Initialize the uploader.

        Args:
            request: The request to finalize with the drained payload.

        """
        self._request = request

    async def upload(self, source: AsyncIterable[bytes]) -> S3Response | None:
        """Drain the source and finalize the request.

        Args:
            source: The byte source.

        Returns:
            The response, or None if the source or the request failed and the failure handler was called.

        """
        buffer = bytearray()

        try:
            async for chunk in source:
                buffer.extend(chunk)
        except Exception as exc:  # noqa: BLE001
            msg = f"Reading the payload of {self._request.method} {self._request.path} failed: {exc}"
            error = S3UploadStreamClientException(msg)
            error.__cause__ = exc
            await self._request.fail(error)
            return None

        logger.debug(f"Read {len(buffer)} bytes for {self._request.method} {self._request.path}")

        self._request.set_header(CONTENT_LENGTH, str(len(buffer)))
        return await self._request.finalize(buffer)
