"""
Flat-file parser package.

Schema-driven translation between delimited flat-file text and typed records.
"""

__version__ = "1.0.0"

from flatfile_parser.casting import (
    DEFAULT_FALSE_VALUES,
    DEFAULT_TRUE_VALUES,
    CastResult,
    CoercionError,
    cast_value,
    coerce_value,
    format_value,
)
from flatfile_parser.config_models import FieldConfig, FieldType, LineEnding, SchemaConfig
from flatfile_parser.date_formats import compile_date_format
from flatfile_parser.flat_writer import FlatFileWriter
from flatfile_parser.models import ParseError, ParseResult, ParsingStats, Record
from flatfile_parser.parsers import BaseParser, parse_document
from flatfile_parser.serializer import format_record, stringify_records
from flatfile_parser.streaming import RecordStream, iter_records, parse_stream, stream_file_records
from flatfile_parser.validators import validate_field

__all__ = [
    "SchemaConfig",
    "FieldConfig",
    "FieldType",
    "LineEnding",
    "Record",
    "ParseError",
    "ParseResult",
    "ParsingStats",
    "BaseParser",
    "CastResult",
    "CoercionError",
    "DEFAULT_TRUE_VALUES",
    "DEFAULT_FALSE_VALUES",
    "cast_value",
    "coerce_value",
    "format_value",
    "compile_date_format",
    "validate_field",
    "parse_document",
    "parse_stream",
    "RecordStream",
    "iter_records",
    "stream_file_records",
    "format_record",
    "stringify_records",
    "FlatFileWriter",
]
