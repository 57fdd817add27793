"""
Orchestration logic for batch flat-file conversion.

This module contains the business logic for processing files in batch,
independent of CLI concerns: each input file is parsed with the input schema
and re-serialized with the output schema (the input schema by default).
"""

import csv
import logging
import time
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from flatfile_parser.config_models import SchemaConfig
from flatfile_parser.flat_writer import FlatFileWriter
from flatfile_parser.models import ParseError, ParsingStats
from flatfile_parser.parsers import parse_document
from flatfile_parser.streaming import stream_file_records

logger = logging.getLogger(__name__)

ERROR_COLUMNS = ["line", "field", "position", "message", "raw"]


class FileProcessingError(Exception):
    """Exception raised when a file fails to process."""
    pass


def write_error_report(path: Path, errors: List[ParseError]) -> None:
    """Write collected field errors to a CSV report."""
    with path.open("w", newline="", encoding="utf-8") as fp:
        writer = csv.DictWriter(fp, fieldnames=ERROR_COLUMNS)
        writer.writeheader()
        for error in errors:
            writer.writerow(asdict(error))


def _process_file(input_file: Path, schema: SchemaConfig, output_schema: SchemaConfig,
                  output_dir: Path, stats: ParsingStats, dry_run: bool, streaming: bool,
                  encoding: str, flush_every: Optional[int]) -> None:
    output_file = output_dir / input_file.name
    if not dry_run and output_file.resolve() == input_file.resolve():
        raise FileProcessingError(f"Output would overwrite input file: {input_file}")

    if streaming:
        records = stream_file_records(input_file, schema, encoding=encoding, stats=stats)
        if dry_run:
            for _ in records:
                pass
        else:
            with FlatFileWriter(output_file, output_schema, flush_every=flush_every) as writer:
                writer.write_records(records)
        return

    with open(input_file, "r", encoding=encoding, newline="") as f:
        content = f.read()

    result = parse_document(content, schema, stats)
    if result.errors:
        logger.warning(f"{input_file.name}: {len(result.errors)} field error(s) on "
                       f"{len(result.error_lines)} line(s)")

    if dry_run:
        return

    with FlatFileWriter(output_file, output_schema, flush_every=flush_every) as writer:
        writer.write_records(result.records)

    if result.errors:
        error_file = output_dir / f"{input_file.stem}_errors.csv"
        write_error_report(error_file, result.errors)
        logger.info(f"Error report written to {error_file}")


def parse_files(
    schema_path: Path,
    input_files: List[Path],
    output_dir: Path,
    output_schema_path: Optional[Path] = None,
    dry_run: bool = False,
    fail_fast: bool = False,
    streaming: bool = False,
    encoding: str = "utf-8",
    flush_every: Optional[int] = 1000,
) -> Tuple[Dict[str, float], Dict[str, ParsingStats], Dict[str, str]]:
    """Parse files according to a schema and write them back out.

    Args:
        schema_path: Path to the input schema JSON file
        input_files: List of input files to process
        output_dir: Output directory for results
        output_schema_path: Optional schema for the output files (default: input schema)
        dry_run: If True, parse and validate but don't write outputs
        fail_fast: If True, stop on first file error (default: continue)
        streaming: If True, stream each file (no error reports are produced)
        encoding: Input text encoding
        flush_every: Output flush interval in records

    Returns:
        Tuple: (stats dict, per-file stats dict, file_errors dict)

    Raises:
        FileNotFoundError: If a schema file doesn't exist
        ValidationError: If a schema is invalid
        FileProcessingError: On the first file failure when fail_fast is set
    """
    start_time = time.time()
    file_errors: Dict[str, str] = {}
    record_stats: Dict[str, ParsingStats] = {}

    logger.info(f"Loading schema from {schema_path}")
    schema = SchemaConfig.from_json_file(schema_path)
    output_schema = schema
    if output_schema_path is not None:
        logger.info(f"Loading output schema from {output_schema_path}")
        output_schema = SchemaConfig.from_json_file(output_schema_path)
    logger.info("Schema valid")

    if dry_run:
        logger.info("DRY RUN MODE - Files will be parsed but no outputs will be written")
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Files: {len(input_files)}, Streaming: {streaming}, Fail-fast: {fail_fast}")

    successful_files = 0
    failed_files = 0

    for file_idx, input_file in enumerate(input_files, 1):
        file_start = time.time()

        if not input_file.exists():
            error_msg = f"Input file not found: {input_file}"
            logger.error(f"[{file_idx}/{len(input_files)}] {error_msg}")
            file_errors[str(input_file)] = error_msg
            failed_files += 1
            if fail_fast:
                raise FileProcessingError(error_msg)
            continue

        try:
            size_mb = input_file.stat().st_size / (1024 * 1024)
            logger.info(f"[{file_idx}/{len(input_files)}] Processing: {input_file.name} ({size_mb:.2f} MB)")
        except OSError as e:
            logger.warning(f"[{file_idx}/{len(input_files)}] Processing: {input_file.name} (size unavailable: {e})")

        file_stats = ParsingStats()
        record_stats[input_file.name] = file_stats

        try:
            _process_file(input_file, schema, output_schema, output_dir, file_stats,
                          dry_run, streaming, encoding, flush_every)

            file_duration = time.time() - file_start
            logger.info(f"Completed {input_file.name} in {file_duration:.2f}s")
            successful_files += 1

        except Exception as e:
            file_duration = time.time() - file_start
            error_msg = f"{type(e).__name__}: {str(e)}"
            logger.error(f"Failed {input_file.name} after {file_duration:.2f}s: {error_msg}")
            file_errors[str(input_file)] = error_msg
            failed_files += 1

            if fail_fast:
                raise FileProcessingError(f"File processing failed: {error_msg}") from e
            # Otherwise continue to next file

        finally:
            if file_stats.end_time is None:
                file_stats.end_time = time.time()

    total_duration = time.time() - start_time
    logger.info(f"Total processing time: {total_duration:.2f}s")
    logger.info(f"Files: {successful_files} succeeded, {failed_files} failed")

    stats = {
        "processed": successful_files + failed_files,
        "succeeded": successful_files,
        "failed": failed_files,
        "duration": total_duration
    }

    return stats, record_stats, file_errors
