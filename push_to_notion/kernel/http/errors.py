"""
Error responses for the HTTP surface.

Slack never reads these bodies: a non-2xx answer to an interactivity
request just shows the user a generic failure. They exist for operators
probing the endpoint by hand and for the logs, so every body carries the
stable error code and the request id that appears in the structlog lines.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from push_to_notion.kernel.errors import PushToNotionError

logger = structlog.get_logger()


def _error_response(
    request: Request,
    status_code: int,
    body: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> Response:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers for typed errors, HTTP errors and crashes."""

    @app.exception_handler(PushToNotionError)
    async def _typed_error(request: Request, exc: PushToNotionError) -> Response:
        logger.warning("Slack request rejected", code=exc.code, error=exc.message)
        body = exc.to_public_dict(request_id=None)
        return _error_response(request, exc.status_code, body)

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> Response:
        body = {"detail": exc.detail, "code": f"http.{exc.status_code}"}
        return _error_response(request, int(exc.status_code), body, dict(exc.headers or {}))

    @app.exception_handler(Exception)
    async def _crash(request: Request, exc: Exception) -> Response:
        # Details stay in the log; the body only says something broke
        logger.exception("Unhandled error while serving request", error=str(exc))
        body = {"detail": "Internal Server Error", "code": "internal.unhandled"}
        return _error_response(request, 500, body)
