"""Custom ASGI middleware used by the FastAPI app."""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from correlativos.core.config import settings
from correlativos.core.logging import request_id_ctx_var, user_id_ctx_var

BODY_METHODS = {"POST", "PUT", "PATCH"}


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Injects request IDs and emits structured access logs.

    Routes record the acting user on ``request.state.user_id`` so the access
    line attributes allocations to whoever requested them.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        request_token = request_id_ctx_var.set(request_id)
        user_token = user_id_ctx_var.set("-")
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            status_code = response.status_code if response else 500
            logger.bind(
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=round(duration_ms, 2),
                user_id=str(getattr(request.state, "user_id", "-")),
            ).info("request_completed")
            if response is not None:
                response.headers.setdefault("X-Request-ID", request_id)
            request_id_ctx_var.reset(request_token)
            user_id_ctx_var.reset(user_token)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject write requests whose declared body exceeds ``MAX_REQUEST_BYTES``."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.method not in BODY_METHODS:
            return await call_next(request)
        try:
            declared = int(request.headers.get("content-length", "0"))
        except ValueError:
            declared = 0
        if declared > settings.MAX_REQUEST_BYTES:
            return JSONResponse(
                status_code=413,
                content={"detail": "Solicitud demasiado grande"},
            )
        return await call_next(request)
