from __future__ import annotations

import re

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.endpoints import RequestBodyBuilder, get_endpoint
from pdf4me_connector.runtime.host import ExecutionContext, Item

from .common import (
    as_bool,
    binary_item,
    document_builder,
    optional_param,
    required_text,
    resolve_document,
    run_endpoint,
    run_json_endpoint,
)


async def barcode_generator(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("CreateBarcode")
    text = required_text(ctx, "text", index)
    barcode_type = str(ctx.get_parameter("barcodeType", index, "qrCode") or "qrCode")
    body = (
        RequestBodyBuilder(spec, logger=client.logger)
        .set("text", text)
        .set("barcodeType", barcode_type)
        .set("hideText", as_bool(ctx.get_parameter("hideText", index, False)))
        .set_optional("inline", optional_param(ctx, "inline", index))
        .with_profiles(optional_param(ctx, "profiles", index))
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = f"{re.sub(r'[^a-zA-Z0-9]', '_', text)}_{barcode_type}.png"
    return [binary_item(content, file_name, "image/png", barcodeType=barcode_type)]


async def read_barcode_from_pdf(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ReadBarcodes")
    document = await resolve_document(ctx, index, client, spec)
    barcode_type = str(ctx.get_parameter("barcodeType", index, "all") or "all")
    body = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("barcodeType", [barcode_type])
        .set("pages", ctx.get_parameter("pages", index, "all") or "all")
        .build()
    )
    barcodes = await run_json_endpoint(ctx, client, spec, body)
    return [
        Item(
            json={
                "success": True,
                "message": "Barcode data extracted successfully",
                "docName": document.name,
                "barcodes": barcodes,
            }
        )
    ]


async def read_swiss_qr_code(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ReadSwissQrBill")
    document = await resolve_document(ctx, index, client, spec)
    body = document_builder(ctx, index, spec, document, logger=client.logger).build()
    swiss_qr_data = await run_json_endpoint(ctx, client, spec, body)
    return [
        Item(
            json={
                "success": True,
                "message": "SwissQR code reading completed successfully",
                "docName": document.name,
                "swissQrData": swiss_qr_data,
            }
        )
    ]
