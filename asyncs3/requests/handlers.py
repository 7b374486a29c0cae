"""Response and failure handlers."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from asyncs3.http.models import S3Response
from asyncs3.observability.utils import observe_exception

logger = logging.getLogger(__name__)

type ResponseHandler = Callable[[S3Response], Awaitable[Any] | Any]
type FailureHandler = Callable[[Exception], Awaitable[Any] | Any]


async def log_and_drop(exc: Exception) -> None:
    """Default failure handler.

    Logs the exception, records it on the current span and reports it to Sentry, then drops it.
    """
    logger.error(f"S3 request failed: {exc}", exc_info=exc)
    await observe_exception(exc)


async def call_handler[T](handler: Callable[[T], Awaitable[Any] | Any], value: T) -> None:
    """Call a sync or async handler."""
    result = handler(value)
    if inspect.isawaitable(result):
        await result
