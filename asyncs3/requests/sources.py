"""Byte sources."""

from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles

DEFAULT_CHUNK_SIZE = 64 * 1024


async def file_source(path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Read a local file in chunks without blocking the event loop.

    Args:
        path: The file to read.
        chunk_size: The maximum size of a chunk.

    Yields:
        The file content, chunk by chunk.

    """
    async with aiofiles.open(path, "rb") as file:
        while chunk := await file.read(chunk_size):
            yield chunk


async def bytes_source(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield an in-memory payload in chunks."""
    for start in range(0, len(data), chunk_size):
        yield data[start : start + chunk_size]
