"""
Base parser class with common functionality.

This module holds the line-level logic shared by the whole-document and the
streaming parser: line and field splitting, the validate-then-cast pipeline
that turns one line into one record, stats and progress logging.
"""

import logging
import re
import time
from typing import List, Optional

from flatfile_parser.casting import cast_value
from flatfile_parser.config_models import LineEnding, SchemaConfig
from flatfile_parser.models import ParseError, ParsingStats, Record
from flatfile_parser.validators import validate_field

logger = logging.getLogger(__name__)

ANY_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(content: str, line_ending: LineEnding) -> List[str]:
    """Split a document according to the schema's line ending policy.

    LF splits only on bare ``\\n``, CRLF only on ``\\r\\n``, auto on either
    (mixed endings allowed).
    """
    if line_ending == LineEnding.CRLF:
        return content.split("\r\n")
    if line_ending == LineEnding.LF:
        return content.split("\n")
    return ANY_LINE_BREAK.split(content)


def split_fields(line: str, delimiter: str) -> List[str]:
    """Split one line into positional column substrings."""
    return line.split(delimiter)


class BaseParser:
    """Base class for the document and streaming parsers.

    Provides common functionality including:
    - Record building (validation, then casting, per field)
    - Stats tracking
    - Progress logging
    """

    def __init__(self, schema: SchemaConfig, stats: Optional[ParsingStats] = None,
                 progress_interval: int = 10000):
        """Initialize parser with a validated schema.

        Args:
            schema: Validated, read-only schema
            stats: Optional stats object updated in place
            progress_interval: Log progress every N lines (0 disables)
        """
        self.schema = schema
        self.fields = schema.fields
        self.delimiter = schema.delimiter
        self.stats = stats if stats is not None else ParsingStats()
        self.progress_interval = progress_interval

    def build_record(self, line: str, line_number: int,
                     errors: Optional[List[ParseError]] = None) -> Record:
        """Turn one non-blank line into a record.

        Every schema field gets a key. Failed and empty fields are None.
        When ``errors`` is given, one ParseError per failing field is
        appended to it; otherwise failures are dropped silently.

        Args:
            line: Source line without its terminator
            line_number: 1-indexed source line number
            errors: Optional list collecting field errors

        Returns:
            The record
        """
        parts = split_fields(line, self.delimiter)
        column_count = len(parts)
        record: Record = {}

        for fld in self.fields:
            raw = parts[fld.position] if fld.position < column_count else ""

            if errors is not None:
                validation_error = validate_field(raw, fld, line_number)
                if validation_error:
                    errors.append(validation_error)
                    record[fld.name] = None
                    continue

            if not raw.strip():
                record[fld.name] = None
                continue

            result = cast_value(raw, fld)
            if result.ok:
                record[fld.name] = result.value
            else:
                record[fld.name] = None
                if errors is not None:
                    errors.append(ParseError(
                        line=line_number,
                        field=fld.name,
                        position=fld.position,
                        message=str(result.error),
                        raw=raw,
                    ))

        return record

    def log_progress(self, line_number: int) -> None:
        """Log parsing progress at intervals."""
        if self.progress_interval > 0 and line_number % self.progress_interval == 0:
            logger.info(f"Processed {line_number:,} lines ({self.stats.total_rows:,} records)")

    def finalize_stats(self) -> None:
        """Finalize parsing statistics with end time."""
        if self.stats.end_time is None:
            self.stats.end_time = time.time()
