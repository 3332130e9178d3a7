"""Async client and workflow actions for the PDF4me document-processing API."""

from .api import AsyncJobClient, BlobUploader, JobOutcome
from .config import AuthScheme, Pdf4meSettings, PollPolicy, load_settings
from .endpoints import ENDPOINTS, EndpointSpec, RequestBodyBuilder, get_endpoint
from .errors import (
    ConfigurationError,
    JobCancelledError,
    NetworkError,
    Pdf4meError,
    PollTimeoutError,
    ProtocolError,
    RequestError,
    UploadError,
    ValidationError,
)
from .node import Operation, Pdf4meNode, build_action_registry, resolve_operation
from .profiles import sanitize_profiles
from .runtime import BinaryData, Item, JsonlAuditLogger, StaticExecutionContext

__all__ = [
    "AsyncJobClient",
    "AuthScheme",
    "BinaryData",
    "BlobUploader",
    "build_action_registry",
    "ConfigurationError",
    "ENDPOINTS",
    "EndpointSpec",
    "get_endpoint",
    "Item",
    "JobCancelledError",
    "JobOutcome",
    "JsonlAuditLogger",
    "load_settings",
    "NetworkError",
    "Operation",
    "Pdf4meError",
    "Pdf4meNode",
    "Pdf4meSettings",
    "PollPolicy",
    "PollTimeoutError",
    "ProtocolError",
    "RequestBodyBuilder",
    "RequestError",
    "resolve_operation",
    "sanitize_profiles",
    "StaticExecutionContext",
    "UploadError",
    "ValidationError",
]
