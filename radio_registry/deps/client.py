from __future__ import annotations

from fastapi import Request


def client_ip(request: Request) -> str | None:
    """Best guess at the caller's address, recorded on radios and audit entries."""

    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.TRUST_PROXY:
        forwarded = request.headers.get("x-forwarded-for") or ""
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None
