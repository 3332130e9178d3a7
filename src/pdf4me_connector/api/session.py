from __future__ import annotations

import httpx

from pdf4me_connector.config import Pdf4meSettings

from .auth import build_auth_headers


def open_client(
    settings: Pdf4meSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    headers = build_auth_headers(settings)
    headers["Accept"] = "*/*"
    return httpx.AsyncClient(
        base_url=settings.resolved_base_url,
        headers=headers,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        transport=transport,
    )
