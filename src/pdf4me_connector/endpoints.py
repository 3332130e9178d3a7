from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ValidationError
from .hooks.observability import EventLogger
from .profiles import PROFILES_KEY, sanitize_profiles

DOCUMENT_KEYS = ("docContent", "docName")


class ResponseKind(str, Enum):
    BINARY = "binary"
    JSON = "json"


@dataclass(frozen=True)
class EndpointSpec:
    name: str
    path: str
    # The server expects either "IsAsync" or "async" depending on the endpoint.
    async_key: str
    response_kind: ResponseKind = ResponseKind.BINARY
    required: tuple[str, ...] = DOCUMENT_KEYS
    optional: tuple[str, ...] = ()
    prefers_blob: bool = False

    @property
    def known_keys(self) -> frozenset[str]:
        return frozenset((*self.required, *self.optional, self.async_key, PROFILES_KEY))


def _endpoint(name: str, async_key: str = "IsAsync", **kwargs: Any) -> EndpointSpec:
    return EndpointSpec(name=name, path=f"/api/v2/{name}", async_key=async_key, **kwargs)


ENDPOINTS: dict[str, EndpointSpec] = {
    spec.name: spec
    for spec in (
        _endpoint("Merge", async_key="async"),
        _endpoint("Optimize", async_key="async", required=(*DOCUMENT_KEYS, "optimizeProfile")),
        _endpoint(
            "Stamp",
            required=(*DOCUMENT_KEYS, "text"),
            optional=(
                "alignX",
                "alignY",
                "fontSize",
                "fontColor",
                "pages",
                "marginXInMM",
                "marginYInMM",
                "opacity",
                "isBackground",
                "rotation",
            ),
        ),
        _endpoint("Rotate", required=(*DOCUMENT_KEYS, "rotationType")),
        _endpoint("Protect", async_key="async", required=(*DOCUMENT_KEYS, "password"), optional=("pdfPermission",)),
        _endpoint(
            "SplitPdf",
            response_kind=ResponseKind.JSON,
            required=(*DOCUMENT_KEYS, "splitAction"),
            optional=("fileNaming", "splitActionNumber", "splitSequence", "splitRanges"),
        ),
        _endpoint("ConvertToPdf"),
        _endpoint(
            "ConvertUrlToPdf",
            async_key="async",
            required=("webUrl", "docName"),
            optional=(
                "authType",
                "username",
                "password",
                "layout",
                "format",
                "scale",
                "topMargin",
                "leftMargin",
                "rightMargin",
                "bottomMargin",
                "printBackground",
                "displayHeaderFooter",
            ),
        ),
        _endpoint(
            "ConvertPdfToWord",
            optional=("qualityType", "language", "mergeAllSheets", "ocrWhenNeeded", "outputFormat"),
        ),
        _endpoint(
            "CreateBarcode",
            async_key="async",
            required=("text", "barcodeType"),
            optional=("hideText", "inline"),
        ),
        _endpoint(
            "ReadBarcodes",
            response_kind=ResponseKind.JSON,
            optional=("barcodeType", "pages"),
        ),
        _endpoint("ReadSwissQrBill", response_kind=ResponseKind.JSON, prefers_blob=True),
        _endpoint("ProcessInvoice", response_kind=ResponseKind.JSON),
        _endpoint("UploadFile", response_kind=ResponseKind.JSON, optional=("hours",)),
    )
}


def get_endpoint(name: str) -> EndpointSpec:
    try:
        return ENDPOINTS[name]
    except KeyError as exc:
        raise ValidationError(f"unknown endpoint: {name}") from exc


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class RequestBodyBuilder:
    """Collects request fields for one endpoint and validates them before serialization."""

    def __init__(self, spec: EndpointSpec, *, logger: EventLogger | None = None) -> None:
        self.spec = spec
        self.logger = logger
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> "RequestBodyBuilder":
        if key not in self.spec.known_keys or key == self.spec.async_key:
            raise ValidationError(f"{self.spec.name} does not accept field: {key}")
        self._values[key] = value
        return self

    def set_optional(self, key: str, value: Any) -> "RequestBodyBuilder":
        if _is_blank(value):
            return self
        return self.set(key, value)

    def with_profiles(self, raw: Any) -> "RequestBodyBuilder":
        if _is_blank(raw):
            return self
        self._values[PROFILES_KEY] = raw
        return self

    def build(self) -> dict[str, Any]:
        body = dict(self._values)
        sanitize_profiles(
            body,
            recognized_keys=(*self.spec.required, *self.spec.optional),
            logger=self.logger,
        )
        missing = [key for key in self.spec.required if _is_blank(body.get(key))]
        if missing:
            raise ValidationError(f"{self.spec.name} request is missing required field(s): {', '.join(missing)}")
        body[self.spec.async_key] = True
        return body
