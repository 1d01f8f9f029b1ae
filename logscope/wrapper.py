"""Handler decorator opening a logger scope per Lambda-style invocation."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Dict, Optional

from .context import run_with_logger
from .logger import StructuredLogger, create_logger


Handler = Callable[..., Any]

_CONTEXT_FIELDS = {
    "request_id": ("aws_request_id", "awsRequestId"),
    "function_name": ("function_name", "functionName"),
}

_DESCRIBED_ATTRIBUTES = (
    "aws_request_id",
    "function_name",
    "function_version",
    "invoked_function_arn",
    "memory_limit_in_mb",
    "log_group_name",
    "log_stream_name",
)


def with_logger(
    handler: Optional[Handler] = None,
    *,
    logger: Optional[StructuredLogger] = None,
    **options: Any,
) -> Any:
    """Wrap ``handler(event, context)`` so it runs inside a request scope.

    Usable bare (``@with_logger``) or with ``create_logger`` options
    (``@with_logger(level="DEBUG", redaction=...)``). A ``logger`` may be
    supplied instead of options to reuse an existing root logger.
    """

    if handler is None:
        return lambda fn: with_logger(fn, logger=logger, **options)

    root: Dict[str, StructuredLogger] = {}

    def _scoped_logger(context: Any) -> StructuredLogger:
        if "logger" not in root:
            root["logger"] = logger or create_logger(**options)
        return root["logger"].child(**extract_request_fields(context))

    if inspect.iscoroutinefunction(handler):

        @functools.wraps(handler)
        async def _async_wrapper(event: Any, context: Any = None, *args: Any) -> Any:
            scoped = _scoped_logger(context)
            _log_invocation(scoped, event, context)

            async def _body() -> Any:
                try:
                    return await handler(event, context, *args)
                except Exception as exc:
                    scoped.error("Unhandled Lambda Exception", exc)
                    raise

            return await run_with_logger(scoped, _body)

        return _async_wrapper

    @functools.wraps(handler)
    def _wrapper(event: Any, context: Any = None, *args: Any) -> Any:
        scoped = _scoped_logger(context)
        _log_invocation(scoped, event, context)

        def _body() -> Any:
            try:
                return handler(event, context, *args)
            except Exception as exc:
                scoped.error("Unhandled Lambda Exception", exc)
                raise

        return run_with_logger(scoped, _body)

    return _wrapper


def extract_request_fields(context: Any) -> Dict[str, Any]:
    """Pull the request id and function name from a Lambda context."""

    fields: Dict[str, Any] = {}
    if context is None:
        return fields

    for field, candidates in _CONTEXT_FIELDS.items():
        for candidate in candidates:
            value = _lookup(context, candidate)
            if value:
                fields[field] = value
                break

    return fields


def _lookup(context: Any, name: str) -> Any:
    if isinstance(context, dict):
        return context.get(name)
    return getattr(context, name, None)


def _describe_context(context: Any) -> Any:
    if context is None or isinstance(context, dict):
        return context

    return {
        name: getattr(context, name)
        for name in _DESCRIBED_ATTRIBUTES
        if getattr(context, name, None) is not None
    }


def _log_invocation(logger: StructuredLogger, event: Any, context: Any) -> None:
    logger.debug("Lambda Event", event=event)
    logger.debug("Lambda Context", lambda_context=_describe_context(context))
