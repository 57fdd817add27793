"""
Streaming parser for processing huge files without loading them entirely into memory.

This module consumes a byte stream chunk by chunk, reconstructs lines across
chunk boundaries and yields one typed record per line. Unlike
``parse_document`` it keeps no error list: a field that fails validation or
casting is simply None.

Both line endings are accepted regardless of the schema's ``line_ending``,
since stream sources are not assumed to use a single consistent ending.
"""

import codecs
import inspect
import logging
from functools import partial
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Iterator, List, Optional, Union

from flatfile_parser.config_models import SchemaConfig
from flatfile_parser.models import ParsingStats, Record
from flatfile_parser.parsers.base_parser import ANY_LINE_BREAK, BaseParser

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LineBuffer:
    """Decode byte chunks and cut them into complete lines.

    Incomplete multi-byte sequences stay in the decoder and the trailing,
    possibly incomplete line stays buffered until a later chunk ends it.
    Text is only split once it contains a line break, so a long line spread
    over many chunks is scanned once.
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "replace"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._pieces: List[str] = []

    def feed(self, chunk: bytes) -> List[str]:
        """Add a chunk and return the lines it completed."""
        text = self._decoder.decode(chunk)
        if not text:
            return []
        self._pieces.append(text)
        if "\n" not in text:
            return []
        lines = ANY_LINE_BREAK.split("".join(self._pieces))
        tail = lines.pop()
        self._pieces = [tail] if tail else []
        return lines

    def finish(self) -> List[str]:
        """Flush the decoder and return the final unterminated line, if any."""
        self._pieces.append(self._decoder.decode(b"", final=True))
        tail = "".join(self._pieces)
        self._pieces = []
        return [tail] if tail.strip() else []


class StreamingParser(BaseParser):
    """Line-by-line parser that silently nulls failed fields."""

    def __init__(self, schema: SchemaConfig, stats: Optional[ParsingStats] = None,
                 progress_interval: int = 10000):
        super().__init__(schema, stats, progress_interval)
        self.line_number = 0
        self._awaiting_header = schema.has_header

    def consume(self, lines: Iterable[str]) -> Iterator[Record]:
        """Yield one record per non-blank data line."""
        for line in lines:
            self.line_number += 1

            if self._awaiting_header:
                self._awaiting_header = False
                logger.debug("Skipping header line")
                continue

            if not line.strip():
                self.stats.skipped_rows += 1
                continue

            self.stats.total_rows += 1
            self.log_progress(self.line_number)
            yield self.build_record(line, self.line_number)


class _ChunkSource:
    """Uniform async access to a reader (``await read(n)``) or an async iterable of bytes."""

    def __init__(self, source: Any, chunk_size: int):
        self._source = source
        self._chunk_size = chunk_size
        if hasattr(source, "read"):
            self._iterator = None
        elif hasattr(source, "__aiter__"):
            self._iterator = source.__aiter__()
        else:
            raise TypeError(
                f"Expected an async byte reader or async iterable, got {type(source).__name__}"
            )

    async def next_chunk(self) -> Optional[bytes]:
        """Return the next chunk, or None at end of input."""
        if self._iterator is None:
            chunk = await self._source.read(self._chunk_size)
            return chunk or None
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return None

    async def release(self) -> None:
        closer = getattr(self._iterator, "aclose", None)
        if closer is None:
            closer = getattr(self._source, "aclose", None) or getattr(self._source, "close", None)
        if closer is not None:
            result = closer()
            if inspect.isawaitable(result):
                await result


async def _shutdown(source: _ChunkSource, parser: StreamingParser) -> None:
    parser.finalize_stats()
    await source.release()
    logger.debug(f"Stream released after {parser.line_number:,} lines")


async def _generate_records(source: _ChunkSource, parser: StreamingParser,
                            lines: LineBuffer) -> AsyncIterator[Record]:
    try:
        while True:
            chunk = await source.next_chunk()
            if chunk is None:
                break
            for record in parser.consume(lines.feed(chunk)):
                yield record
        for record in parser.consume(lines.finish()):
            yield record
    finally:
        await _shutdown(source, parser)


class RecordStream:
    """Lazy, single-pass async iterator of records over a byte stream.

    Records come from an async generator whose ``finally`` releases the
    source, so the source is released exactly once: on exhaustion, on
    ``aclose()`` (or leaving ``async with``), when reading from the source
    raises or is cancelled, and, after a bare ``break``, when the event
    loop finalizes the abandoned generator.

    Example:
        >>> async with parse_stream(reader, schema) as records:
        ...     async for record in records:
        ...         await sink.insert(record)
    """

    def __init__(self, source: Any, schema: SchemaConfig, encoding: str = "utf-8",
                 chunk_size: int = DEFAULT_CHUNK_SIZE, progress_interval: int = 10000):
        self._source = _ChunkSource(source, chunk_size)
        self._parser = StreamingParser(schema, progress_interval=progress_interval)
        self._records = _generate_records(self._source, self._parser, LineBuffer(encoding))
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> ParsingStats:
        return self._parser.stats

    def __aiter__(self) -> "RecordStream":
        return self

    async def __anext__(self) -> Record:
        if self._closed:
            raise StopAsyncIteration
        self._started = True
        try:
            return await self._records.__anext__()
        except BaseException:
            # The generator has finished and released the source
            self._closed = True
            raise

    async def aclose(self) -> None:
        """Stop the stream and release the source. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._records.aclose()
        if not self._started:
            # A generator that never ran has no finally to run
            await _shutdown(self._source, self._parser)

    async def __aenter__(self) -> "RecordStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False


def parse_stream(source: Any, schema: SchemaConfig, *, encoding: str = "utf-8",
                 chunk_size: int = DEFAULT_CHUNK_SIZE, progress_interval: int = 10000) -> RecordStream:
    """Parse a byte stream incrementally into records.

    Args:
        source: ``asyncio.StreamReader`` or any object with an awaitable
            ``read(n)``, or an async iterable of ``bytes`` chunks
        schema: Validated schema
        encoding: Text encoding of the stream
        chunk_size: Bytes requested per read (reader sources only)
        progress_interval: Log progress every N lines

    Returns:
        RecordStream to iterate with ``async for``
    """
    return RecordStream(source, schema, encoding=encoding, chunk_size=chunk_size,
                        progress_interval=progress_interval)


def _iter_chunks(source: Any, chunk_size: int) -> Iterator[bytes]:
    if hasattr(source, "read"):
        return iter(partial(source.read, chunk_size), b"")
    return iter(source)


def iter_records(source: Any, schema: SchemaConfig, *, encoding: str = "utf-8",
                 chunk_size: int = DEFAULT_CHUNK_SIZE, stats: Optional[ParsingStats] = None,
                 progress_interval: int = 10000) -> Iterator[Record]:
    """Synchronous counterpart of ``parse_stream``.

    Args:
        source: Binary file object or iterable of ``bytes`` chunks; closed
            (if closable) when iteration ends
        schema: Validated schema
        encoding: Text encoding of the stream
        chunk_size: Bytes per read (file objects only)
        stats: Optional stats object updated in place
        progress_interval: Log progress every N lines

    Yields:
        One record per non-blank data line
    """
    parser = StreamingParser(schema, stats, progress_interval)
    lines = LineBuffer(encoding)
    try:
        for chunk in _iter_chunks(source, chunk_size):
            yield from parser.consume(lines.feed(chunk))
        yield from parser.consume(lines.finish())
    finally:
        parser.finalize_stats()
        close = getattr(source, "close", None)
        if close is not None:
            close()


def stream_file_records(file_path: Union[str, Path], schema: SchemaConfig, *,
                        encoding: str = "utf-8", chunk_size: int = DEFAULT_CHUNK_SIZE,
                        stats: Optional[ParsingStats] = None,
                        progress_interval: int = 10000) -> Iterator[Record]:
    """Stream records from a file without loading it into memory.

    Example:
        >>> for record in stream_file_records(Path("huge.dat"), schema):
        ...     process(record)
    """
    with open(file_path, "rb") as f:
        yield from iter_records(f, schema, encoding=encoding, chunk_size=chunk_size,
                                stats=stats, progress_interval=progress_interval)
