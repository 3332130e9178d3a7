from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pdf4me_connector.api.client import AsyncJobClient, decode_json_result
from pdf4me_connector.endpoints import EndpointSpec, RequestBodyBuilder
from pdf4me_connector.errors import JobCancelledError, ProtocolError, ValidationError
from pdf4me_connector.hooks.observability import EventLogger
from pdf4me_connector.runtime.host import BinaryData, ExecutionContext, Item

ActionHandler = Callable[[ExecutionContext, int, AsyncJobClient], Awaitable[list[Item]]]

INPUT_BINARY = "binaryData"
INPUT_BASE64 = "base64"
INPUT_URL = "url"
INPUT_FILE_PATH = "filePath"

PDF_MIME_TYPE = "application/pdf"


@dataclass
class DocumentInput:
    content: str
    name: str
    source: str
    blob_id: str | None = None


def required_text(ctx: ExecutionContext, name: str, index: int) -> str:
    value = ctx.get_parameter(name, index, "")
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"parameter '{name}' is required")
    return text


def optional_param(ctx: ExecutionContext, name: str, index: int) -> Any:
    return ctx.get_parameter(name, index, None)


def split_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"true", "1", "yes", "on"}:
            return True
        if text in {"false", "0", "no", "off", ""}:
            return False
        raise ValidationError(f"expected a boolean, got: {value}")
    return bool(value)


def strip_data_url(content: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, keeping only the payload."""
    text = content.strip()
    if "," in text:
        text = text.split(",", 1)[1].strip()
    return text


def split_base64_list(value: Any) -> list[str]:
    # A comma-separated string may contain data URLs, whose own comma must not split them.
    if isinstance(value, (list, tuple)):
        return [strip_data_url(str(item)) for item in value if str(item).strip()]
    contents: list[str] = []
    prefix = ""
    for part in split_list(value):
        if part.startswith("data:") and ";base64" in part and not prefix:
            prefix = part
            continue
        contents.append(strip_data_url(f"{prefix},{part}") if prefix else part)
        prefix = ""
    return contents


def ensure_not_cancelled(ctx: ExecutionContext) -> None:
    if ctx.cancel_event is not None and ctx.cancel_event.is_set():
        raise JobCancelledError(0)


async def stage_binary(
    client: AsyncJobClient,
    spec: EndpointSpec,
    data: bytes,
    name: str,
    source: str,
) -> DocumentInput:
    if not data:
        raise ValidationError(f"input file '{name}' is empty")
    if spec.prefers_blob or len(data) > client.settings.blob_upload_threshold_bytes:
        blob_id = await client.upload_blob(data, name)
        return DocumentInput(content=blob_id, name=name, source=source, blob_id=blob_id)
    encoded = base64.b64encode(data).decode("ascii")
    return DocumentInput(content=encoded, name=name, source=source)


async def resolve_document(
    ctx: ExecutionContext,
    index: int,
    client: AsyncJobClient,
    spec: EndpointSpec,
    *,
    default_name: str = "document.pdf",
) -> DocumentInput:
    """Turn the item's input (binary, base64, URL or local file) into a docContent reference."""
    ensure_not_cancelled(ctx)
    input_type = ctx.get_parameter("inputDataType", index, INPUT_BINARY)

    if input_type == INPUT_BINARY:
        property_name = ctx.get_parameter("binaryPropertyName", index, "data")
        binary = ctx.get_binary_buffer(index, property_name)
        name = binary.file_name or default_name
        return await stage_binary(client, spec, binary.data, name, input_type)

    if input_type == INPUT_BASE64:
        content = strip_data_url(required_text(ctx, "base64Content", index))
        if not content:
            raise ValidationError("parameter 'base64Content' has no payload")
        try:
            base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("parameter 'base64Content' is not valid base64") from exc
        name = str(ctx.get_parameter("docName", index, "") or default_name)
        return DocumentInput(content=content, name=name, source=input_type)

    if input_type == INPUT_URL:
        url = required_text(ctx, "fileUrl", index)
        if not url.startswith(("http://", "https://")):
            raise ValidationError(f"parameter 'fileUrl' must be an http(s) URL: {url}")
        name = url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1] or default_name
        return DocumentInput(content=url, name=name, source=input_type)

    if input_type == INPUT_FILE_PATH:
        path = Path(required_text(ctx, "filePath", index)).expanduser()
        if not path.is_file():
            raise ValidationError(f"file not found: {path}")
        return await stage_binary(client, spec, path.read_bytes(), path.name, input_type)

    raise ValidationError(f"unsupported input data type: {input_type}")


def document_builder(
    ctx: ExecutionContext,
    index: int,
    spec: EndpointSpec,
    document: DocumentInput,
    *,
    logger: EventLogger | None = None,
) -> RequestBodyBuilder:
    builder = RequestBodyBuilder(spec, logger=logger)
    builder.set("docContent", document.content)
    builder.set("docName", document.name)
    builder.with_profiles(optional_param(ctx, "profiles", index))
    return builder


async def run_endpoint(
    ctx: ExecutionContext,
    client: AsyncJobClient,
    spec: EndpointSpec,
    body: dict[str, Any],
) -> bytes:
    return await client.submit_and_wait(spec.path, body, cancel_event=ctx.cancel_event)


async def run_json_endpoint(
    ctx: ExecutionContext,
    client: AsyncJobClient,
    spec: EndpointSpec,
    body: dict[str, Any],
) -> Any:
    return decode_json_result(await run_endpoint(ctx, client, spec, body))


def ensure_extension(file_name: str, extension: str) -> str:
    ext = extension if extension.startswith(".") else f".{extension}"
    if file_name.lower().endswith(ext.lower()):
        return file_name
    stem = re.sub(r"\.[^./]*$", "", file_name) or "output"
    return f"{stem}{ext}"


def output_file_name(ctx: ExecutionContext, index: int, fallback: str, extension: str) -> str:
    name = str(ctx.get_parameter("outputFileName", index, "") or "").strip() or fallback
    return ensure_extension(name, extension)


def binary_item(content: bytes, file_name: str, mime_type: str, **metadata: Any) -> Item:
    binary = BinaryData(data=content, file_name=file_name, mime_type=mime_type)
    return Item(
        json={
            "fileName": file_name,
            "mimeType": mime_type,
            "fileSize": binary.file_size,
            "success": True,
            **metadata,
        },
        binary={"data": binary},
    )


def decode_documents(payload: Any) -> list[tuple[str, bytes]]:
    """Collect base64 documents from the shapes split-style endpoints return."""
    if isinstance(payload, dict) and isinstance(payload.get("splitedDocuments"), list):
        entries = [
            (doc.get("fileName"), doc.get("streamFile"))
            for doc in payload["splitedDocuments"]
            if isinstance(doc, dict)
        ]
    elif isinstance(payload, dict) and isinstance(payload.get("documents"), list):
        entries = [
            (doc.get("docName") or doc.get("fileName"), doc.get("docContent"))
            for doc in payload["documents"]
            if isinstance(doc, dict)
        ]
    elif isinstance(payload, list):
        entries = [(doc.get("docName"), doc.get("docContent")) for doc in payload if isinstance(doc, dict)]
    elif isinstance(payload, dict) and payload.get("docContent"):
        entries = [(payload.get("docName"), payload.get("docContent"))]
    else:
        raise ProtocolError("response did not contain any documents")

    documents: list[tuple[str, bytes]] = []
    for position, (name, content) in enumerate(entries, start=1):
        if not isinstance(content, str) or not content:
            continue
        try:
            data = base64.b64decode(content)
        except (binascii.Error, ValueError) as exc:
            raise ProtocolError(f"document {position} is not valid base64") from exc
        documents.append((str(name or f"document_{position}.pdf"), data))
    if not documents:
        raise ProtocolError("response did not contain any documents")
    return documents
