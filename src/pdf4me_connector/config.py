from __future__ import annotations

import os
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, Field, model_validator

from .errors import ConfigurationError

ENV_PREFIX = "PDF4ME_"
DEFAULT_BASE_URLS = {
    "production": "https://api.pdf4me.com",
    "development": "https://api-dev.pdf4me.com",
}


class AuthScheme(str, Enum):
    BASIC = "basic"
    BEARER = "bearer"


class Pdf4meEnvironment(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"


class PollPolicy(BaseModel):
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 15.0
    backoff_multiplier: float = 2.0
    max_attempts: int = 40
    max_elapsed_seconds: float = 600.0
    poll_method: str = "GET"

    @model_validator(mode="after")
    def validate_bounds(self) -> "PollPolicy":
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay_seconds <= 0 or self.max_delay_seconds <= 0:
            raise ValueError("poll delays must be positive")
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise ValueError("max_delay_seconds must be >= initial_delay_seconds")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if self.max_elapsed_seconds <= 0:
            raise ValueError("max_elapsed_seconds must be positive")
        self.poll_method = self.poll_method.upper()
        if self.poll_method not in {"GET", "POST"}:
            raise ValueError(f"unsupported poll_method: {self.poll_method}")
        return self

    def delay_for_attempt(self, attempt: int) -> float:
        exponent = max(0, attempt - 1)
        return min(self.initial_delay_seconds * self.backoff_multiplier**exponent, self.max_delay_seconds)


class Pdf4meSettings(BaseModel):
    api_key: str
    auth_scheme: AuthScheme = AuthScheme.BASIC
    environment: Pdf4meEnvironment = Pdf4meEnvironment.PRODUCTION
    base_url: str | None = None
    request_timeout_seconds: float = 60.0
    blob_upload_threshold_bytes: int = 4 * 1024 * 1024
    poll: PollPolicy = Field(default_factory=PollPolicy)

    @model_validator(mode="after")
    def validate_settings(self) -> "Pdf4meSettings":
        self.api_key = self.api_key.strip()
        if not self.api_key:
            raise ValueError("api_key must not be empty")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.blob_upload_threshold_bytes < 0:
            raise ValueError("blob_upload_threshold_bytes must be >= 0")
        return self

    @property
    def resolved_base_url(self) -> str:
        base = self.base_url or DEFAULT_BASE_URLS[self.environment.value]
        return base.rstrip("/")


def _env_text(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(f"{ENV_PREFIX}{name}")
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def load_settings(environ: Mapping[str, str] | None = None) -> Pdf4meSettings:
    env = environ if environ is not None else os.environ
    api_key = _env_text(env, "API_KEY")
    if not api_key:
        raise ConfigurationError(f"missing required env var: {ENV_PREFIX}API_KEY")

    poll_fields = {
        "initial_delay_seconds": "POLL_INITIAL_DELAY_SECONDS",
        "max_delay_seconds": "POLL_MAX_DELAY_SECONDS",
        "backoff_multiplier": "POLL_BACKOFF_MULTIPLIER",
        "max_attempts": "POLL_MAX_ATTEMPTS",
        "max_elapsed_seconds": "POLL_MAX_ELAPSED_SECONDS",
        "poll_method": "POLL_METHOD",
    }
    poll_values: dict[str, str] = {}
    for field, name in poll_fields.items():
        value = _env_text(env, name)
        if value is not None:
            poll_values[field] = value
    values: dict[str, object] = {"api_key": api_key, "poll": poll_values}
    optional_fields = {
        "auth_scheme": "AUTH_SCHEME",
        "environment": "ENV",
        "base_url": "BASE_URL",
        "request_timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
        "blob_upload_threshold_bytes": "BLOB_UPLOAD_THRESHOLD_BYTES",
    }
    for field, name in optional_fields.items():
        value = _env_text(env, name)
        if value is not None:
            values[field] = value.lower() if field in {"auth_scheme", "environment"} else value

    try:
        return Pdf4meSettings.model_validate(values)
    except ValueError as exc:
        raise ConfigurationError(f"invalid {ENV_PREFIX}* settings: {exc}") from exc
