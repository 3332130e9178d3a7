from __future__ import annotations

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.endpoints import get_endpoint
from pdf4me_connector.errors import ProtocolError, ValidationError
from pdf4me_connector.runtime.host import ExecutionContext, Item

from .common import document_builder, resolve_document, run_json_endpoint


async def upload_file(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("UploadFile")
    try:
        hours = int(ctx.get_parameter("hours", index, 2))
    except (TypeError, ValueError) as exc:
        raise ValidationError("parameter 'hours' must be a whole number") from exc
    if not 1 <= hours <= 24:
        raise ValidationError(f"parameter 'hours' must be between 1 and 24, got {hours}")

    document = await resolve_document(ctx, index, client, spec, default_name="uploaded_file")
    body = document_builder(ctx, index, spec, document, logger=client.logger).set("hours", hours).build()
    result = await run_json_endpoint(ctx, client, spec, body)

    document_url = None
    if isinstance(result, dict):
        documents = result.get("documents")
        if isinstance(documents, list) and documents and isinstance(documents[0], dict):
            document_url = documents[0].get("documentUrl")
        document_url = document_url or result.get("documentUrl")
    if not document_url:
        raise ProtocolError("no document URL found in upload response")
    return [Item(json={"documentUrl": document_url, "docName": document.name, "hours": hours})]
