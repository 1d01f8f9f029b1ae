"""Execution-scoped storage for the current logger.

A scope binds a logger to the causal execution branch that opened it: the
body passed to :func:`run_with_logger` together with everything it calls or
awaits. The binding lives in a :class:`~contextvars.ContextVar`, so every
``asyncio`` task (which copies the context when it is created) sees the
scope that was current at its creation, and sibling tasks never observe one
another's scope.
"""

from __future__ import annotations

import functools
import inspect
import logging
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterator, Mapping, Optional, TypeVar

if TYPE_CHECKING:  # pragma: no cover
    from .logger import StructuredLogger


LOGGER = logging.getLogger("logscope.context")

T = TypeVar("T")


@dataclass(frozen=True)
class ExecutionScope:
    """Logger bound to the current execution branch."""

    logger: "StructuredLogger"

    @property
    def fields(self) -> Mapping[str, Any]:
        """Scope-identifying fields, e.g. the request id bound on the logger."""

        return self.logger.fields


_SCOPE: ContextVar[Optional[ExecutionScope]] = ContextVar("logscope_scope", default=None)


def current_scope() -> Optional[ExecutionScope]:
    """Return the active scope for the calling branch, if any."""

    return _SCOPE.get()


def get_logger() -> Optional["StructuredLogger"]:
    """Return the logger bound in the nearest enclosing scope."""

    scope = _SCOPE.get()
    return scope.logger if scope is not None else None


def update_logger_context(new_logger: "StructuredLogger") -> None:
    """Rebind the current scope's logger for the rest of this branch.

    Code running later in the same branch, and tasks spawned from it after
    this call, observe ``new_logger``. Tasks spawned earlier keep the logger
    they started with.
    """

    scope = _SCOPE.get()
    if scope is None:
        LOGGER.warning(
            "update_logger_context called outside of an active scope; ignoring"
        )
        return

    _SCOPE.set(replace(scope, logger=new_logger))


def push_scope(logger: "StructuredLogger") -> Token:
    """Open a scope bound to ``logger`` and return the token closing it."""

    return _SCOPE.set(ExecutionScope(logger=logger))


def pop_scope(token: Token) -> None:
    _SCOPE.reset(token)


@contextmanager
def logger_scope(logger: "StructuredLogger") -> Iterator["StructuredLogger"]:
    """Context manager running the enclosed block in a scope bound to ``logger``."""

    token = push_scope(logger)
    try:
        yield logger
    finally:
        pop_scope(token)


def run_with_logger(
    logger: "StructuredLogger",
    body: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Execute ``body`` with ``logger`` bound as the current logger.

    Coroutine functions are not started here: an awaitable is returned and
    the scope is opened when it runs, so concurrent invocations gathered
    together each get their own scope.
    """

    if inspect.iscoroutinefunction(body):
        return _run_async(logger, body, args, kwargs)  # type: ignore[return-value]

    token = push_scope(logger)
    try:
        result = body(*args, **kwargs)
        if inspect.isawaitable(result):
            return _await_in_scope(_SCOPE.get(), result)  # type: ignore[return-value]
        return result
    finally:
        pop_scope(token)


def bind_scope(func: Callable[..., T]) -> Callable[..., T]:
    """Capture the current scope and return ``func`` wrapped to run inside it.

    Useful for work handed to thread pools, which do not inherit context.
    """

    scope = _SCOPE.get()

    @functools.wraps(func)
    def _bound(*args: Any, **kwargs: Any) -> T:
        token = _SCOPE.set(scope)
        try:
            return func(*args, **kwargs)
        finally:
            _SCOPE.reset(token)

    return _bound


# --------------------- internal helpers ---------------------
async def _run_async(
    logger: "StructuredLogger",
    body: Callable[..., Awaitable[T]],
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> T:
    token = push_scope(logger)
    try:
        return await body(*args, **kwargs)
    finally:
        pop_scope(token)


async def _await_in_scope(scope: Optional[ExecutionScope], awaitable: Awaitable[T]) -> T:
    token = _SCOPE.set(scope)
    try:
        return await awaitable
    finally:
        _SCOPE.reset(token)


__all__ = [
    "ExecutionScope",
    "bind_scope",
    "current_scope",
    "get_logger",
    "logger_scope",
    "pop_scope",
    "push_scope",
    "run_with_logger",
    "update_logger_context",
]
