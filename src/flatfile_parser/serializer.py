"""
Serialization of typed records back to delimited text.
"""

from typing import Any, Iterable, Mapping

from flatfile_parser.casting import format_value
from flatfile_parser.config_models import LineEnding, SchemaConfig


def line_terminator(schema: SchemaConfig) -> str:
    """CRLF schemas serialize with ``\\r\\n``; LF and auto with ``\\n``."""
    return "\r\n" if schema.line_ending == LineEnding.CRLF else "\n"


def format_header(schema: SchemaConfig) -> str:
    """Field names in position order, joined by the delimiter."""
    return schema.delimiter.join(schema.field_names)


def format_record(record: Mapping[str, Any], schema: SchemaConfig) -> str:
    """Render one record as a delimited line (no terminator).

    Missing keys and None values render as empty columns.
    """
    return schema.delimiter.join(
        format_value(record.get(fld.name), fld) for fld in schema.fields
    )


def stringify_records(records: Iterable[Mapping[str, Any]], schema: SchemaConfig) -> str:
    """Serialize records to a flat-file document.

    Lines are joined by the schema's terminator with no trailing terminator.
    No records and no header gives an empty string; no records with a header
    gives just the header line.

    Example:
        >>> text = stringify_records(result.records, schema)
        >>> Path("output.dat").write_text(text, newline="")
    """
    lines = []
    if schema.has_header:
        lines.append(format_header(schema))
    lines.extend(format_record(record, schema) for record in records)
    return line_terminator(schema).join(lines)
