from __future__ import annotations

import base64
import binascii

from pdf4me_connector.api.client import AsyncJobClient
from pdf4me_connector.endpoints import EndpointSpec, RequestBodyBuilder, get_endpoint
from pdf4me_connector.errors import ValidationError
from pdf4me_connector.runtime.host import BinaryData, ExecutionContext, Item

from .common import (
    INPUT_BASE64,
    INPUT_BINARY,
    INPUT_URL,
    PDF_MIME_TYPE,
    binary_item,
    decode_documents,
    document_builder,
    ensure_extension,
    ensure_not_cancelled,
    optional_param,
    output_file_name,
    required_text,
    resolve_document,
    run_endpoint,
    run_json_endpoint,
    split_base64_list,
    split_list,
    stage_binary,
)

STAMP_OPTIONAL_PARAMS = (
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
)


async def _merge_inputs(
    ctx: ExecutionContext,
    index: int,
    client: AsyncJobClient,
    spec: EndpointSpec,
) -> list[str]:
    ensure_not_cancelled(ctx)
    input_type = ctx.get_parameter("inputDataType", index, INPUT_BINARY)
    if input_type == INPUT_BINARY:
        names = split_list(ctx.get_parameter("binaryPropertyNames", index, "data,data1"))
        binaries = [ctx.get_binary_buffer(index, name) for name in names]
        if len(binaries) < 2:
            return []
        contents: list[str] = []
        for binary in binaries:
            document = await stage_binary(client, spec, binary.data, binary.file_name, input_type)
            contents.append(document.content)
        return contents
    if input_type == INPUT_BASE64:
        contents = split_base64_list(ctx.get_parameter("base64Contents", index, []))
        for position, content in enumerate(contents, start=1):
            try:
                base64.b64decode(content, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValidationError(f"base64Contents entry {position} is not valid base64") from exc
        return contents
    if input_type == INPUT_URL:
        return split_list(ctx.get_parameter("fileUrls", index, []))
    raise ValidationError(f"unsupported input data type for merge: {input_type}")


async def merge_multiple_pdfs(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("Merge")
    contents = await _merge_inputs(ctx, index, client, spec)
    if len(contents) < 2:
        raise ValidationError("at least 2 PDF files are required for merging")

    doc_name = str(ctx.get_parameter("docName", index, "") or "merged_output.pdf")
    body = (
        RequestBodyBuilder(spec, logger=client.logger)
        .set("docContent", contents)
        .set("docName", doc_name)
        .with_profiles(optional_param(ctx, "profiles", index))
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, doc_name, ".pdf")
    return [binary_item(content, file_name, PDF_MIME_TYPE, inputFileCount=len(contents))]


async def compress_pdf(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("Optimize")
    document = await resolve_document(ctx, index, client, spec)
    optimize_profile = str(ctx.get_parameter("optimizeProfile", index, "Web") or "Web")
    body = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("optimizeProfile", optimize_profile)
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, f"compressed_{document.name}", ".pdf")
    return [
        binary_item(
            content,
            file_name,
            PDF_MIME_TYPE,
            message="PDF compressed successfully",
            optimizeProfile=optimize_profile,
        )
    ]


async def add_text_stamp(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("Stamp")
    text = required_text(ctx, "text", index)
    document = await resolve_document(ctx, index, client, spec)
    builder = document_builder(ctx, index, spec, document, logger=client.logger).set("text", text)
    for name in STAMP_OPTIONAL_PARAMS:
        builder.set_optional(name, optional_param(ctx, name, index))
    content = await run_endpoint(ctx, client, spec, builder.build())
    file_name = output_file_name(ctx, index, f"stamped_{document.name}", ".pdf")
    return [binary_item(content, file_name, PDF_MIME_TYPE, stampText=text)]


async def rotate_document(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("Rotate")
    rotation_type = str(ctx.get_parameter("rotationType", index, "Clockwise") or "Clockwise")
    document = await resolve_document(ctx, index, client, spec)
    body = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("rotationType", rotation_type)
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, f"rotated_{document.name}", ".pdf")
    return [binary_item(content, file_name, PDF_MIME_TYPE, rotationType=rotation_type)]


async def protect_document(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("Protect")
    password = required_text(ctx, "password", index)
    document = await resolve_document(ctx, index, client, spec)
    body = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("password", password)
        .set_optional("pdfPermission", ctx.get_parameter("pdfPermission", index, "All"))
        .build()
    )
    content = await run_endpoint(ctx, client, spec, body)
    file_name = output_file_name(ctx, index, f"protected_{document.name}", ".pdf")
    return [binary_item(content, file_name, PDF_MIME_TYPE, message="PDF protected successfully")]


async def split_pdf(ctx: ExecutionContext, index: int, client: AsyncJobClient) -> list[Item]:
    spec = get_endpoint("SplitPdf")
    split_action = str(ctx.get_parameter("splitAction", index, "SplitAfterPage") or "SplitAfterPage")
    document = await resolve_document(ctx, index, client, spec)
    builder = (
        document_builder(ctx, index, spec, document, logger=client.logger)
        .set("splitAction", split_action)
        .set_optional("fileNaming", ctx.get_parameter("fileNaming", index, "NameAsPerOrder"))
        .set_optional("splitActionNumber", optional_param(ctx, "splitActionNumber", index))
        .set_optional("splitRanges", optional_param(ctx, "splitRanges", index))
    )
    sequence = split_list(optional_param(ctx, "splitSequence", index))
    if sequence:
        try:
            builder.set("splitSequence", [int(value) for value in sequence])
        except ValueError as exc:
            raise ValidationError(f"splitSequence must be comma-separated page numbers: {sequence}") from exc

    payload = await run_json_endpoint(ctx, client, spec, builder.build())
    documents = decode_documents(payload)
    binaries: dict[str, BinaryData] = {}
    files: list[dict[str, object]] = []
    for position, (name, data) in enumerate(documents, start=1):
        key = f"file_{position}"
        file_name = ensure_extension(name, ".pdf")
        binaries[key] = BinaryData(data=data, file_name=file_name, mime_type=PDF_MIME_TYPE)
        files.append({"fileName": file_name, "binaryProperty": key, "fileSize": len(data)})
    return [
        Item(
            json={
                "success": True,
                "sourcePdf": document.name,
                "splitAction": split_action,
                "totalFiles": len(files),
                "files": files,
            },
            binary=binaries,
        )
    ]
