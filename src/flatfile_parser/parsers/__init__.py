"""
Parser modules for flat-file documents.
"""

from flatfile_parser.parsers.base_parser import BaseParser, split_fields, split_lines
from flatfile_parser.parsers.document_parser import DocumentParser, parse_document

__all__ = [
    "BaseParser",
    "DocumentParser",
    "parse_document",
    "split_fields",
    "split_lines",
]
