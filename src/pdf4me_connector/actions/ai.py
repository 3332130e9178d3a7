from __future__ import annotations

from datetime import datetime, timezone

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.endpoints import get_endpoint
from pdf4me_connector.runtime.host import ExecutionContext, Item

from .common import document_builder, resolve_document, run_json_endpoint


async def ai_invoice_parser(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ProcessInvoice")
    document = await resolve_document(ctx, index, client, spec, default_name="invoice.pdf")
    body = document_builder(ctx, index, spec, document, logger=client.logger).build()
    parsed = await run_json_endpoint(ctx, client, spec, body)
    data = dict(parsed) if isinstance(parsed, dict) else {"result": parsed}
    data["_metadata"] = {
        "success": True,
        "message": "Invoice processed successfully using AI",
        "processingTimestamp": datetime.now(timezone.utc).isoformat(),
        "sourceFileName": document.name,
        "operation": "aiInvoiceParser",
    }
    return [Item(json=data)]
