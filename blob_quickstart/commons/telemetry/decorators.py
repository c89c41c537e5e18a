"""Telemetry helpers for timing calls and scoping log context."""

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar, overload

from blob_quickstart.commons.telemetry.logger import (
    get_log_context,
    get_logger,
    log_context_var,
)

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]: ...


def timed(
    func: Callable[P, Awaitable[R]] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Any:
    """Decorator to measure and log how long a coroutine function takes.

    Can be used with or without arguments:
        @timed
        async def upload(): ...

        @timed(level=logging.INFO, threshold_ms=500)
        async def upload(): ...

    Args:
        func: The coroutine function to decorate (when used without parentheses).
        logger: Optional logger instance. Defaults to the function's module logger.
        level: Log level for timing messages.
        threshold_ms: Only log if execution exceeds this threshold in milliseconds.

    Returns:
        Decorated coroutine function.
    """

    def decorator(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        log = logger or get_logger(fn.__module__)

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            outcome = "ok"
            try:
                return await fn(*args, **kwargs)
            except BaseException:
                outcome = "error"
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                if threshold_ms is None or elapsed_ms >= threshold_ms:
                    log.log(
                        level,
                        f"{fn.__qualname__} completed",
                        extra={"duration_ms": round(elapsed_ms, 2), "outcome": outcome},
                    )

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


class LogContext:
    """Context manager for adding temporary logging context."""

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._previous_context: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._previous_context = get_log_context()
        log_context_var.set({**self._previous_context, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        log_context_var.set(self._previous_context)
