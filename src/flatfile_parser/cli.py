"""
Command-line interface for the flat-file parser.

This module handles CLI argument parsing, logging configuration,
and user interaction.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from flatfile_parser.orchestrator import FileProcessingError, parse_files

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flatfile-parser",
        description="Schema-driven delimited flat-file parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate and normalize pipe-delimited files
  flatfile-parser --schema employees.json --out ./output employees.pipe

  # Convert to another layout (e.g. CSV with header)
  flatfile-parser --schema in.json --output-schema out.json --out ./output data.pipe

  # Stream a very large file (no error report)
  flatfile-parser --schema in.json --out ./output --stream huge.dat

  # Dry run (validate only, no output)
  flatfile-parser --schema in.json --out ./output --dry-run data.pipe
        """
    )
    parser.add_argument("--schema", required=True, type=Path, help="Input schema JSON file")
    parser.add_argument("--out", required=True, type=Path, help="Output directory")
    parser.add_argument("input_files", nargs="+", type=Path, help="Input files")
    parser.add_argument("--output-schema", type=Path, default=None,
                        help="Schema JSON for output files (default: input schema)")
    parser.add_argument("--stream", action="store_true",
                        help="Stream input files chunk by chunk (no error report)")
    parser.add_argument("--encoding", default="utf-8", help="Input text encoding")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")
    parser.add_argument("--dry-run", action="store_true",
                        help="Parse and validate without writing outputs")
    parser.add_argument("--fail-fast", action="store_true",
                        help="Stop processing on first file error (default: continue)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Returns:
        Exit code: 0 = success, 1 = all files failed, 2 = partial failure
    """
    args = build_arg_parser().parse_args(argv)
    logging.getLogger().setLevel(args.log_level)

    try:
        stats, record_stats, file_errors = parse_files(
            args.schema,
            args.input_files,
            args.out,
            output_schema_path=args.output_schema,
            dry_run=args.dry_run,
            fail_fast=args.fail_fast,
            streaming=args.stream,
            encoding=args.encoding,
        )

        logger.info("="*80)
        logger.info("PARSING COMPLETE")
        logger.info("="*80)

        if record_stats:
            logger.info("Performance Metrics:")
            for name, pstats in sorted(record_stats.items()):
                success_rate = (pstats.success_rows / pstats.total_rows * 100) if pstats.total_rows > 0 else 0
                logger.info(f"  {name}:")
                logger.info(f"    Records: {pstats.total_rows:,}")
                if not args.stream:
                    logger.info(f"    Clean: {pstats.success_rows:,} ({success_rate:.1f}%)")
                    logger.info(f"    With errors: {pstats.failed_rows:,}")
                    logger.info(f"    Field errors: {pstats.field_errors:,}")
                if pstats.skipped_rows > 0:
                    logger.info(f"    Blank lines skipped: {pstats.skipped_rows:,}")
                logger.info(f"    Duration: {pstats.duration:.2f}s")
                logger.info(f"    Throughput: {pstats.rows_per_second:.0f} rows/sec")

        total_records = sum(s.total_rows for s in record_stats.values())
        total_errors = sum(s.field_errors for s in record_stats.values())

        logger.info("="*80)
        logger.info(f"Total Records: {total_records:,}")
        if total_errors > 0:
            logger.warning(f"Total Field Errors: {total_errors:,} (see *_errors.csv files)")

        if not args.dry_run:
            logger.info(f"Output Location: {args.out.resolve()}")
        else:
            logger.info("DRY RUN - No outputs written")

        if file_errors:
            logger.error("="*80)
            logger.error(f"FILE PROCESSING ERRORS ({len(file_errors)} files failed):")
            for file_path, error_msg in file_errors.items():
                logger.error(f"  {file_path}: {error_msg}")
            logger.error("="*80)

        logger.info("="*80)

        total_files = len(args.input_files)
        failed_file_count = len(file_errors)

        if failed_file_count == 0:
            return 0
        elif failed_file_count == total_files:
            return 1
        else:
            return 2

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValidationError as e:
        logger.error(f"Schema validation error: {e}")
        return 1
    except FileProcessingError as e:
        logger.error(f"File processing error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
