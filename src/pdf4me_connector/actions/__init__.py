"""Action adapters mapping host parameters to PDF4me job requests."""

from .ai import ai_invoice_parser
from .barcode import barcode_generator, read_barcode_from_pdf, read_swiss_qr_code
from .common import ActionHandler, DocumentInput, resolve_document
from .convert import convert_pdf_to_word, convert_to_pdf, url_to_pdf
from .files import upload_file
from .pdf import (
    add_text_stamp,
    compress_pdf,
    merge_multiple_pdfs,
    protect_document,
    rotate_document,
    split_pdf,
)

__all__ = [
    "ActionHandler",
    "add_text_stamp",
    "ai_invoice_parser",
    "barcode_generator",
    "compress_pdf",
    "convert_pdf_to_word",
    "convert_to_pdf",
    "DocumentInput",
    "merge_multiple_pdfs",
    "protect_document",
    "read_barcode_from_pdf",
    "read_swiss_qr_code",
    "resolve_document",
    "rotate_document",
    "split_pdf",
    "upload_file",
    "url_to_pdf",
]
