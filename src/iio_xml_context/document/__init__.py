"""Document parsing collaborator backed by lxml."""

from .source import ParsedDocument, parse_document_buffer, parse_document_file

__all__ = [
    "ParsedDocument",
    "parse_document_buffer",
    "parse_document_file",
]
