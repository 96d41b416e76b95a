# ========================
# src/order_cleaning/cli.py
# ========================

"""
Command-line interface for the cleaning pipeline.

Usage:
    clean --in <path> --out <path> [--dedupe-key <field>] [--top-n <int>] [options]
"""

import argparse
import sys
from typing import List, Optional

from .pipeline.deduplication import key_for_field
from .pipeline.errors import PipelineError
from .pipeline.orchestrator import CleaningPipeline
from .utils.config import Config
from .utils.logging_setup import setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clean",
        description="Clean an order CSV file and write aggregate reports."
    )
    parser.add_argument("--in", dest="input_file", required=True, help="Input CSV file")
    parser.add_argument("--out", dest="output_file", required=True, help="Cleaned CSV file to write")
    parser.add_argument("--dedupe-key", help="Column used to detect duplicate orders (default: order_id)")
    parser.add_argument("--top-n", type=int, help="Number of rows in ranked reports (default: 5)")
    parser.add_argument("--delimiter", help="Field delimiter (default: ',')")
    parser.add_argument("--report-dir", help="Directory for reports (default: <out dir>/reports)")
    parser.add_argument("--skip-malformed", action="store_true",
                        help="Skip and report rows that do not match the header instead of failing")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--log-file", help="Also write a DEBUG log to this file")
    return parser


def _config_from_args(args: argparse.Namespace) -> Config:
    overrides = {}
    if args.delimiter is not None:
        overrides['delimiter'] = args.delimiter
    if args.dedupe_key is not None:
        overrides['dedupe_key'] = args.dedupe_key
    if args.top_n is not None:
        overrides['top_n'] = args.top_n
    if args.report_dir is not None:
        overrides['report_dir'] = args.report_dir
    if args.skip_malformed:
        overrides['skip_malformed_rows'] = True
    if args.log_level is not None:
        overrides['log_level'] = args.log_level
    return Config(overrides)


def _print_summary(results: dict) -> None:
    """Print the run summary to stdout."""
    stats = results['stage_stats']

    print("=" * 60)
    print("CLEANING SUMMARY")
    print("=" * 60)
    print(f"Rows loaded:        {stats['rows_loaded']:,}")
    print(f"Rows skipped:       {stats['rows_skipped']:,}")
    print(f"Duplicates dropped: {stats['duplicates_dropped']:,}")
    print(f"Dates swapped:      {stats['dates_swapped']:,}")
    print(f"Rows written:       {stats['rows_written']:,} -> {results['output_file']}")

    print(f"\nFindings: {len(results['findings'])}")
    for kind, count in sorted(results['findings_by_kind'].items()):
        print(f"   • {kind}: {count}")

    print("\nReports:")
    for report_name, file_path in results['saved_files'].items():
        print(f"   • {report_name}: {file_path}")
    print("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the ``clean`` command and return its exit status."""
    args = build_parser().parse_args(argv)
    try:
        config = _config_from_args(args)
    except ValueError as e:
        print(f"cli: ConfigError: {e}", file=sys.stderr)
        return EXIT_USAGE

    invalid = config.invalid_settings()
    if invalid:
        print(f"cli: ConfigError: invalid settings: {', '.join(invalid)}", file=sys.stderr)
        return EXIT_USAGE
    try:
        key_for_field(config.DEDUPE_KEY)
    except ValueError as e:
        print(f"cli: ConfigError: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(log_level=config.LOG_LEVEL, log_file=args.log_file, log_dir=config.LOG_DIR)

    try:
        pipeline = CleaningPipeline(
            input_file=args.input_file,
            output_file=args.output_file,
            config=config,
        )
        results = pipeline.run()
    except PipelineError as e:
        print(e.format(), file=sys.stderr)
        return EXIT_FAILURE

    _print_summary(results)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
