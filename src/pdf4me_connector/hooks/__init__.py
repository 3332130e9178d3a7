"""Observability and secret-masking hooks."""

from .observability import EventLogger, HookEvent
from .security import mask_sensitive_text

__all__ = [
    "EventLogger",
    "HookEvent",
    "mask_sensitive_text",
]
