"""Flask integration helpers for logscope."""

from __future__ import annotations

import time
import uuid
from typing import Any

from flask import Flask, Response, g, request

from .config import get_settings
from .context import get_logger, pop_scope, push_scope
from .logger import StructuredLogger, create_logger


def register_flask_context(
    app: Flask,
    *,
    logger: StructuredLogger | None = None,
    **options: Any,
) -> StructuredLogger:
    """Attach request lifecycle hooks opening a logger scope per request.

    Views and anything they call can fetch the request logger with
    :func:`logscope.get_logger`. Returns the root logger the scopes derive from.
    """

    settings = options.get("settings") or get_settings()
    root = logger or create_logger(options.pop("name", f"{settings.service}.http"), **options)
    request_id_header = settings.request_id_header
    exclude_routes = settings.exclude_routes

    def _should_log_route(path: str) -> bool:
        return not any(path.startswith(prefix) for prefix in exclude_routes)

    @app.before_request
    def _logging_before_request() -> None:  # type: ignore[override]
        if not _should_log_route(request.path):
            return

        g._logging_start = time.perf_counter()
        rid = (request.headers.get(request_id_header) or "").strip()
        if not rid:
            rid = uuid.uuid4().hex[:16]
        g.request_id = rid

        scoped = root.child(request_id=rid, method=request.method, path=request.path)
        g._logging_token = push_scope(scoped)
        g._logging_logger = scoped

    @app.after_request
    def _logging_after_request(response: Response) -> Response:  # type: ignore[override]
        scoped = g.get("_logging_logger")
        if scoped is None:
            return response

        # the view may have rebound the scope with update_logger_context
        current = get_logger() or scoped

        route = request.url_rule.rule if request.url_rule else request.path
        current.info(
            "http_request",
            route=route,
            status=response.status_code,
            lat_ms=_elapsed_ms(g.get("_logging_start")),
            ip=_client_ip(),
            user_agent=request.headers.get("User-Agent"),
        )

        response.headers.setdefault(request_id_header, g.request_id)
        return response

    @app.teardown_request
    def _logging_teardown(_exc: Any) -> None:  # type: ignore[override]
        scoped = g.pop("_logging_logger", None)
        current = (get_logger() or scoped) if scoped is not None else None
        token = g.pop("_logging_token", None)
        if token is not None:
            pop_scope(token)

        if _exc is not None and current is not None:
            current.error(
                "http_exception",
                _exc,
                route=request.path,
                status=_status_code(_exc),
                lat_ms=_elapsed_ms(g.get("_logging_start")),
            )

    return root


def _client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def _elapsed_ms(start: float | None) -> float:
    if start is None:
        return 0.0
    return round((time.perf_counter() - start) * 1000.0, 3)


def _status_code(exc: BaseException) -> int:
    try:
        return int(getattr(exc, "code", 500))
    except (TypeError, ValueError):
        return 500
