"""
Flat-file writer with resource management and performance optimization.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from flatfile_parser.config_models import SchemaConfig
from flatfile_parser.serializer import format_header, format_record, line_terminator

logger = logging.getLogger(__name__)


class FlatFileWriter:
    """Writes records to a flat file one at a time.

    The output is byte-for-byte what ``stringify_records`` returns for the
    same records: terminators go between lines, never after the last one.

    Args:
        path: Output file path (parent directories are created)
        schema: Schema used to format records
        flush_every: Flush to disk every N records (0 = flush on close only,
                     None = flush every record). Default: 1000.
        encoding: Output text encoding
    """

    def __init__(self, path: Union[str, Path], schema: SchemaConfig,
                 flush_every: Optional[int] = 1000, encoding: str = "utf-8"):
        self.path = Path(path)
        self.schema = schema
        self.flush_every = flush_every  # None=every record, 0=on close only, N=every N records
        self._terminator = line_terminator(schema)
        self._row_count = 0
        self._lines_written = 0
        self._closed = False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps CRLF terminators untranslated
        self._fp = self.path.open("w", newline="", encoding=encoding)
        try:
            if schema.has_header:
                self._write_line(format_header(schema))
                self._fp.flush()
        except Exception:
            self._fp.close()
            raise

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures the file is closed."""
        self.close()
        return False  # Don't suppress exceptions

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def row_count(self) -> int:
        """Number of records written so far."""
        return self._row_count

    def _write_line(self, line: str) -> None:
        if self._lines_written:
            self._fp.write(self._terminator)
        self._fp.write(line)
        self._lines_written += 1

    def write_record(self, record: Mapping[str, Any]) -> None:
        """Format and write one record."""
        if self._closed:
            raise RuntimeError("FlatFileWriter is closed")

        self._write_line(format_record(record, self.schema))
        self._row_count += 1

        should_flush = (
            self.flush_every is None or
            (self.flush_every > 0 and self._row_count % self.flush_every == 0)
        )
        if should_flush:
            self._fp.flush()

    def write_records(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Write many records; returns how many were written."""
        written = 0
        for record in records:
            self.write_record(record)
            written += 1
        return written

    def close(self) -> None:
        """Flush and close the output file."""
        if self._closed:
            return
        self._closed = True
        try:
            self._fp.flush()
        finally:
            self._fp.close()
        logger.debug(f"Wrote {self._row_count:,} records to {self.path}")
