#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Order Cleaning Pipeline

Generates a dirty sample order dataset and runs the complete cleaning
pipeline over it.
"""

import sys
import logging
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from order_cleaning.pipeline import CleaningPipeline, PipelineError
from order_cleaning.utils import Config, setup_logging, OrderDataGenerator


def main():
    """Main execution function."""
    config = Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir=config.LOG_DIR
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("ORDER CLEANING PIPELINE - DEMO RUN")
    logger.info("=" * 60)

    input_file = "data/raw/orders.csv"
    output_file = "data/processed/orders_clean.csv"

    # Step 1: Generate sample data
    logger.info("Step 1: Generating sample data...")
    generator = OrderDataGenerator(seed=42)  # Reproducible data
    generation_stats = generator.generate_dataset(
        file_path=input_file,
        num_rows=config.SAMPLE_ROWS,
        error_rate=0.15
    )

    # Step 2: Run the pipeline
    logger.info("Step 2: Running cleaning pipeline...")
    try:
        results = CleaningPipeline(input_file, output_file, config=config).run()
    except PipelineError as e:
        print(e.format(), file=sys.stderr)
        return 1

    # Step 3: Print summary
    _print_execution_summary(results, generation_stats)
    return 0


def _print_execution_summary(results: dict, generation_stats: dict) -> None:
    """Print final execution summary."""
    stats = results['stage_stats']

    print("\n" + "=" * 70)
    print("PIPELINE EXECUTION SUMMARY")
    print("=" * 70)

    print("📊 Data Generation:")
    print(f"   • Rows generated: {generation_stats['total_rows']:,}")
    print(f"   • Duplicates injected: {generation_stats['duplicates_written']:,}")
    print(f"   • Error types injected: {generation_stats['error_types']}")

    print("\n🔄 Data Cleaning:")
    print(f"   • Rows loaded: {stats['rows_loaded']:,}")
    print(f"   • Duplicates dropped: {stats['duplicates_dropped']:,}")
    print(f"   • Repairs: {stats['repairs']}")
    print(f"   • Dates swapped: {stats['dates_swapped']:,}")
    print(f"   • Findings: {results['findings_by_kind']}")

    print("\n📁 Generated Outputs:")
    print(f"   • Cleaned data: {results['output_file']}")
    for report_name, file_path in results['saved_files'].items():
        print(f"   • {report_name.replace('_', ' ').title()}: {Path(file_path).name}")

    print("=" * 70)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
