from __future__ import annotations

from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..deps.client import client_ip
from .settings import AppSettings

LIMITED_PATH_PREFIX = "/api/"


def build_limiter(settings: AppSettings) -> Limiter:
    """Per-client-IP request cap applied by ``ApiRateLimitMiddleware``."""

    return Limiter(
        key_func=lambda request: client_ip(request) or "unknown",
        default_limits=[settings.RATE_LIMIT],
        enabled=settings.RATE_LIMIT_ENABLED,
    )


class ApiRateLimitMiddleware(SlowAPIMiddleware):
    """Only ``/api/*`` counts against the cap; health, metrics and docs pass through."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(LIMITED_PATH_PREFIX):
            return await call_next(request)
        return await super().dispatch(request, call_next)
