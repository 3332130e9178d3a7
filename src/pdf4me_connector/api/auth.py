from __future__ import annotations

from pdf4me_connector.config import AuthScheme, Pdf4meSettings
from pdf4me_connector.errors import ConfigurationError


def build_auth_headers(settings: Pdf4meSettings) -> dict[str, str]:
    key = settings.api_key.strip()
    if not key:
        raise ConfigurationError("pdf4me api key is empty")

    if settings.auth_scheme == AuthScheme.BASIC:
        # PDF4me issues keys already base64-encoded for the Basic scheme.
        return {"Authorization": f"Basic {key}"}
    if settings.auth_scheme == AuthScheme.BEARER:
        return {"Authorization": f"Bearer {key}"}
    raise ConfigurationError(f"unsupported auth scheme: {settings.auth_scheme.value}")
