from __future__ import annotations

import json
from typing import Any

import httpx

from pdf4me_connector.config import Pdf4meSettings
from pdf4me_connector.errors import NetworkError, ProtocolError, UploadError, ValidationError
from pdf4me_connector.hooks.observability import EventLogger

from .session import open_client

UPLOAD_BLOB_PATH = "/api/v2/UploadBlob"
BLOB_ID_KEYS = ("blobId", "blobRef", "id")


class BlobUploader:
    """Stages a raw file on the server and returns the blob id to use as docContent.

    A single attempt is made; a failed upload is surfaced to the caller, who
    decides whether re-sending a large file is worth it.
    """

    def __init__(
        self,
        settings: Pdf4meSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: EventLogger | None = None,
        path: str = UPLOAD_BLOB_PATH,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.logger = logger or EventLogger()
        self.path = path

    async def upload(self, buffer: bytes, file_name: str) -> str:
        if not buffer:
            raise ValidationError("blob upload requires a non-empty buffer")
        name = (file_name or "").strip()
        if not name:
            raise ValidationError("blob upload requires a file name")

        self.logger.on_http_call("POST", self.path, None, "upload_start")
        async with open_client(self.settings, self.transport) as client:
            try:
                response = await client.post(
                    self.path,
                    params={"fileName": name},
                    content=buffer,
                    headers={"Content-Type": "application/octet-stream"},
                )
            except httpx.TransportError as exc:
                self.logger.on_http_call("POST", self.path, None, "upload_network_error")
                raise NetworkError(f"blob upload failed: {exc}") from exc
        self.logger.on_http_call("POST", self.path, response.status_code, "upload_response")

        if not 200 <= response.status_code < 300:
            raise UploadError(response.status_code, response.text)
        return parse_blob_id(response.text)


def parse_blob_id(raw: str) -> str:
    text = raw.strip()
    if text.startswith("{") or text.startswith('"'):
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProtocolError(f"unparseable blob upload response: {text[:100]}") from exc
        if isinstance(payload, dict):
            text = ""
            for key in BLOB_ID_KEYS:
                value = payload.get(key)
                if isinstance(value, str) and value.strip():
                    text = value.strip()
                    break
        elif isinstance(payload, str):
            text = payload.strip()
        else:
            text = ""
    if not text:
        raise ProtocolError("blob upload response did not contain a blob id")
    return text
