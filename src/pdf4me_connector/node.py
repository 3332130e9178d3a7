from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Mapping

from . import actions
from .actions.common import ActionHandler
from .api.client import AsyncJobClient
from .errors import Pdf4meError, PollTimeoutError, RequestError, UploadError, ValidationError
from .runtime.audit import JsonlAuditLogger
from .runtime.host import ExecutionContext, Item


class Operation(str, Enum):
    MERGE_MULTIPLE_PDFS = "Merge Multiple PDFs"
    COMPRESS_PDF = "Compress PDF"
    ADD_TEXT_STAMP_TO_PDF = "Add Text Stamp To PDF"
    ROTATE_DOCUMENT = "Rotate Document"
    PROTECT_DOCUMENT = "Protect Document"
    SPLIT_PDF = "Split PDF"
    CONVERT_TO_PDF = "Convert To PDF"
    URL_TO_PDF = "URL to PDF"
    CONVERT_PDF_TO_WORD = "Convert PDF To Word"
    BARCODE_GENERATOR = "Barcode Generator"
    READ_BARCODE_FROM_PDF = "Read Barcode From PDF"
    READ_SWISS_QR_CODE = "Read SwissQR Code"
    AI_INVOICE_PARSER = "AI-Invoice Parser"
    UPLOAD_FILE = "Upload Files to Pdf4me"


def build_action_registry() -> dict[Operation, ActionHandler]:
    return {
        Operation.MERGE_MULTIPLE_PDFS: actions.merge_multiple_pdfs,
        Operation.COMPRESS_PDF: actions.compress_pdf,
        Operation.ADD_TEXT_STAMP_TO_PDF: actions.add_text_stamp,
        Operation.ROTATE_DOCUMENT: actions.rotate_document,
        Operation.PROTECT_DOCUMENT: actions.protect_document,
        Operation.SPLIT_PDF: actions.split_pdf,
        Operation.CONVERT_TO_PDF: actions.convert_to_pdf,
        Operation.URL_TO_PDF: actions.url_to_pdf,
        Operation.CONVERT_PDF_TO_WORD: actions.convert_pdf_to_word,
        Operation.BARCODE_GENERATOR: actions.barcode_generator,
        Operation.READ_BARCODE_FROM_PDF: actions.read_barcode_from_pdf,
        Operation.READ_SWISS_QR_CODE: actions.read_swiss_qr_code,
        Operation.AI_INVOICE_PARSER: actions.ai_invoice_parser,
        Operation.UPLOAD_FILE: actions.upload_file,
    }


def resolve_operation(value: str | Operation) -> Operation:
    if isinstance(value, Operation):
        return value
    text = str(value or "").strip()
    for operation in Operation:
        if text in {operation.value, operation.name}:
            return operation
    raise ValidationError(f"unsupported operation: {text or '<empty>'}")


class Pdf4meNode:
    """Runs the selected operation for each input item, one item at a time."""

    def __init__(
        self,
        client: AsyncJobClient,
        registry: Mapping[Operation, ActionHandler],
        *,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self.client = client
        self.registry = registry
        self.audit_logger = audit_logger

    async def execute(self, ctx: ExecutionContext) -> list[Item]:
        results: list[Item] = []
        run_id = uuid.uuid4().hex
        for index, item in enumerate(ctx.get_input_items()):
            raw_operation = ctx.get_parameter("operation", index, "")
            started = time.monotonic()
            try:
                operation = resolve_operation(raw_operation)
                handler = self.registry.get(operation)
                if handler is None:
                    raise ValidationError(f"no handler registered for operation: {operation.value}")
                produced = await handler(ctx, index, self.client)
            except Pdf4meError as exc:
                label = raw_operation.value if isinstance(raw_operation, Operation) else str(raw_operation)
                self._audit(run_id, label, index, "failed", started, error=exc)
                if not ctx.continue_on_fail:
                    raise
                results.append(Item(json={**item.json, "error": str(exc)}))
                continue
            self._audit(run_id, operation.value, index, "succeeded", started)
            results.extend(produced)
        return results

    def _audit(
        self,
        run_id: str,
        operation: str,
        index: int,
        status: str,
        started: float,
        *,
        error: Exception | None = None,
    ) -> None:
        if self.audit_logger is None:
            return
        metadata: dict[str, object] = {"elapsed_seconds": round(time.monotonic() - started, 3)}
        if error is not None:
            metadata["error_type"] = type(error).__name__
            metadata["error"] = str(error)
            if isinstance(error, PollTimeoutError):
                metadata["attempts"] = error.attempts
            if isinstance(error, (RequestError, UploadError)):
                metadata["status_code"] = error.status_code
        self.audit_logger.log(
            run_id=run_id,
            operation=operation,
            item_index=index,
            status=status,
            metadata=metadata,
        )
