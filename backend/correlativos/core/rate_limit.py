"""Rate limiting for the allocation endpoint using SlowAPI."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from correlativos.core.config import settings


def client_address(request: Request) -> str:
    """First hop of ``X-Forwarded-For`` when behind the proxy, else the peer address."""

    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",", 1)[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(key_func=client_address, enabled=settings.RATE_LIMIT_ENABLED)


def init_rate_limiter(app: FastAPI) -> None:
    """Attach the rate limiter and exception handler to the FastAPI app."""

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Demasiadas solicitudes. Intente nuevamente en unos segundos."},
            headers={"Retry-After": "1"},
        )

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
