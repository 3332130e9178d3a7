from __future__ import annotations

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.endpoints import RequestBodyBuilder, get_endpoint
from pdf4me_connector.runtime.host import ExecutionContext, Item

from .common import (
    PDF_MIME_TYPE,
    binary_item,
    document_builder,
    optional_param,
    output_file_name,
    required_text,
    resolve_document,
    run_endpoint,
)

WORD_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
URL_LAYOUT_PARAMS = (
    "scale",
    "topMargin",
    "leftMargin",
    "rightMargin",
    "bottomMargin",
    "printBackground",
    "displayHeaderFooter",
)


async def convert_to_pdf(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ConvertToPdf")
    document = await resolve_document(ctx, index, client, spec, default_name="document.docx")
    body = document_builder(ctx, index, spec, document, logger=client.logger).build()
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, document.name, ".pdf")
    return [binary_item(content, file_name, PDF_MIME_TYPE, sourceFileName=document.name)]


async def url_to_pdf(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ConvertUrlToPdf")
    web_url = required_text(ctx, "webUrl", index)
    auth_type = str(ctx.get_parameter("authType", index, "NoAuth") or "NoAuth")
    doc_name = output_file_name(ctx, index, "webpage.pdf", ".pdf")

    builder = (
        RequestBodyBuilder(spec, logger=client.logger)
        .set("webUrl", web_url)
        .set("docName", doc_name)
        .set("authType", auth_type)
        .set("layout", ctx.get_parameter("layout", index, "portrait"))
        .set("format", ctx.get_parameter("format", index, "A4"))
        .with_profiles(optional_param(ctx, "profiles", index))
    )
    if auth_type == "Basic":
        builder.set("username", required_text(ctx, "username", index))
        builder.set("password", required_text(ctx, "password", index))
    for name in URL_LAYOUT_PARAMS:
        builder.set_optional(name, optional_param(ctx, name, index))

    content = await run_endpoint(ctx, client, spec, builder.build())
    return [binary_item(content, doc_name, PDF_MIME_TYPE, sourceUrl=web_url)]


async def convert_pdf_to_word(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("ConvertPdfToWord")
    document = await resolve_document(ctx, index, client, spec)
    body = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("qualityType", ctx.get_parameter("qualityType", index, "Draft"))
        .set("language", ctx.get_parameter("language", index, "English"))
        .set("mergeAllSheets", True)
        .set("ocrWhenNeeded", "true")
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, document.name, ".docx")
    return [binary_item(content, file_name, WORD_MIME_TYPE, sourceFileName=document.name)]
