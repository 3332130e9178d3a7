"""Async submit/poll client and blob uploader for the PDF4me REST API."""

from .auth import build_auth_headers
from .client import AsyncJobClient, decode_json_result
from .models import (
    JobOutcome,
    JobPhase,
    JobTrace,
    PollKind,
    PollOutcome,
    SubmissionKind,
    SubmissionResult,
    classify_poll,
    classify_submission,
)
from .uploader import UPLOAD_BLOB_PATH, BlobUploader, parse_blob_id

__all__ = [
    "AsyncJobClient",
    "BlobUploader",
    "build_auth_headers",
    "classify_poll",
    "classify_submission",
    "decode_json_result",
    "JobOutcome",
    "JobPhase",
    "JobTrace",
    "parse_blob_id",
    "PollKind",
    "PollOutcome",
    "SubmissionKind",
    "SubmissionResult",
    "UPLOAD_BLOB_PATH",
]
