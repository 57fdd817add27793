"""
Whole-document parser module.
"""

import logging
from typing import Optional

from flatfile_parser.config_models import SchemaConfig
from flatfile_parser.models import ParseResult, ParsingStats
from flatfile_parser.parsers.base_parser import BaseParser, split_lines

logger = logging.getLogger(__name__)


class DocumentParser(BaseParser):
    """Collect-and-continue parser over a complete in-memory document."""

    def parse(self, content: str) -> ParseResult:
        result = ParseResult()
        lines = split_lines(content, self.schema.line_ending)

        # The header still occupies line 1 for numbering
        start = 1 if self.schema.has_header else 0

        for index in range(start, len(lines)):
            line = lines[index]
            line_number = index + 1

            if not line.strip():
                self.stats.skipped_rows += 1
                continue

            error_count = len(result.errors)
            result.records.append(self.build_record(line, line_number, result.errors))

            new_errors = len(result.errors) - error_count
            self.stats.total_rows += 1
            if new_errors:
                self.stats.failed_rows += 1
                self.stats.field_errors += new_errors
                logger.debug(f"Line {line_number}: {new_errors} field error(s)")
            else:
                self.stats.success_rows += 1

            self.log_progress(line_number)

        self.finalize_stats()
        logger.debug(f"Parsed {len(result.records)} records with {len(result.errors)} errors")
        return result


def parse_document(content: str, schema: SchemaConfig, stats: Optional[ParsingStats] = None,
                   progress_interval: int = 10000) -> ParseResult:
    """Parse a complete flat-file document into typed records.

    Records with field errors are still included (with None for the failed
    fields), and each failure is reported once in ``errors``. Bad data never
    raises.

    Args:
        content: Full document text
        schema: Validated schema
        stats: Optional stats object updated in place
        progress_interval: Log progress every N lines

    Returns:
        ParseResult with records and errors

    Example:
        >>> result = parse_document(text, schema)
        >>> for error in result.errors:
        ...     print(error.line, error.field, error.message)
    """
    return DocumentParser(schema, stats, progress_interval).parse(content)
