"""Error reporting for the best-effort sub-operations of trigger writes."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

import httpx

from .client import AlertingApiError

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[BaseException, str], Union[None, Awaitable[None]]]

#: Failures a sub-operation may raise that are reported instead of propagated.
REPORTABLE_ERRORS: tuple[type[BaseException], ...] = (AlertingApiError, httpx.HTTPError)


class ErrorReporter:
    """Log a failed sub-operation and hand it to the caller supplied callback."""

    async def report(
        self,
        error: BaseException,
        message: str,
        callback: ErrorCallback | None = None,
    ) -> None:
        status_code = getattr(error, "status_code", None)
        logger.error(
            "%s %s",
            message,
            error,
            extra={"error_message": message, "status_code": status_code},
        )
        if callback is None:
            return
        result = callback(error, message)
        if inspect.isawaitable(result):
            await result

    async def guard(
        self,
        operation: Awaitable[Any],
        message: str,
        callback: ErrorCallback | None = None,
    ) -> Any:
        """Await ``operation``; report a failure and resolve with ``None`` instead."""

        try:
            return await operation
        except REPORTABLE_ERRORS as exc:
            await self.report(exc, message, callback)
            return None


__all__ = ["ErrorCallback", "ErrorReporter", "REPORTABLE_ERRORS"]
