# ========================
# src/order_cleaning/pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Main orchestrator class that runs the cleaning stages in order.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Optional

from .cleaning import RecordRepairer
from .dates import DateReconciler
from .deduplication import Deduplicator, key_for_field
from .errors import PipelineError
from .export import OrderCSVExporter
from .ingestion import OrderCSVLoader
from .records import merge_findings
from .storage import ReportSaver
from .transformation import OrderAggregator
from .validation import RecordValidator
from ..utils.config import Config
from ..utils.performance_monitor import monitor_performance

logger = logging.getLogger(__name__)


class CleaningPipeline:
    """
    Orchestrates one cleaning run.
    Loads, validates, deduplicates, repairs, reconciles, exports and reports.
    """

    def __init__(self,
                 input_file: str,
                 output_file: str,
                 report_dir: Optional[str] = None,
                 config: Optional[Config] = None,
                 dedupe_key: Optional[str] = None,
                 top_n: Optional[int] = None):
        """
        Initialize the cleaning pipeline.

        Args:
            input_file (str): Path to the input CSV file
            output_file (str): Path of the cleaned CSV file to write
            report_dir (str): Directory for reports; defaults to ``reports``
                              next to the output file
            config (Config): Configuration object
            dedupe_key (str): Column to deduplicate on; overrides the config
            top_n (int): Row limit for ranked reports; overrides the config
        """
        self.config = config or Config()
        self.input_file = input_file
        self.output_file = output_file
        self.report_dir = report_dir or self.config.REPORT_DIR or str(Path(output_file).parent / "reports")
        self.dedupe_key = dedupe_key or self.config.DEDUPE_KEY
        self.top_n = self.config.TOP_N if top_n is None else top_n

        # Initialize pipeline components
        self.loader = OrderCSVLoader(
            delimiter=self.config.DELIMITER,
            skip_malformed=self.config.SKIP_MALFORMED_ROWS
        )
        self.validator = RecordValidator()
        self.deduplicator = Deduplicator(key_for_field(self.dedupe_key))
        self.repairer = RecordRepairer(self.config.UNKNOWN_PRODUCT_NAME)
        self.reconciler = DateReconciler()
        self.exporter = OrderCSVExporter(delimiter=self.config.DELIMITER)
        self.saver = ReportSaver(self.report_dir)

        logger.info("CleaningPipeline initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Output: {self.output_file}")
        logger.info(f"  Reports: {self.report_dir}")
        logger.info(f"  Dedupe key: {self.dedupe_key}")
        logger.debug(str(self.config))

    def run(self) -> dict:
        """
        Execute the complete pipeline from start to finish.

        The cleaned output is staged next to its target and only renamed into
        place once every stage and every report has succeeded; a failed run
        leaves no output file.

        Returns:
            dict: Summary of processing results, findings and saved files

        Raises:
            PipelineError: On any fatal load, export or report failure
        """
        logger.info(f"Starting cleaning pipeline for '{self.input_file}'...")

        try:
            with monitor_performance("CleaningPipeline") as monitor:
                table = self.loader.load_file(self.input_file)
                rows_loaded = len(table)
                monitor.add_checkpoint("load", len(table))

                table, validation_findings = self.validator.validate(table)
                monitor.add_checkpoint("validate", len(table), {'findings': len(validation_findings)})

                table = self.deduplicator.dedupe(table)
                monitor.add_checkpoint("dedupe", len(table))

                table = self.repairer.repair(table)
                monitor.add_checkpoint("repair", len(table))

                table = self.reconciler.reconcile_dates(table)
                monitor.add_checkpoint("reconcile_dates", len(table))

                staged_output = self.exporter.stage(table, self.output_file)
                monitor.add_checkpoint("export", len(table))

                findings = merge_findings(
                    self.loader.skipped_rows, validation_findings, self.reconciler.findings
                )
                findings.sort(key=lambda finding: finding.row_index)

                aggregator = OrderAggregator(table)
                stage_stats = {
                    'rows_loaded': rows_loaded,
                    'rows_skipped': len(self.loader.skipped_rows),
                    'duplicates_dropped': self.deduplicator.duplicates_dropped,
                    'repairs': self.repairer.get_statistics(),
                    'dates_swapped': self.reconciler.records_swapped,
                    'rows_written': len(table),
                    'aggregation': aggregator.get_aggregation_summary(),
                }
                findings_by_kind = dict(Counter(finding.kind.value for finding in findings))

                summary = {
                    'input_file': self.input_file,
                    'output_file': str(self.output_file),
                    'dedupe_key': self.dedupe_key,
                    'top_n': self.top_n,
                    'stage_stats': stage_stats,
                    'findings_by_kind': findings_by_kind,
                }
                try:
                    saved_files = self.saver.save_all(aggregator, findings, summary, self.top_n)
                    monitor.add_checkpoint("report", len(table))
                    output_path = self.exporter.commit(staged_output, self.output_file)
                except PipelineError:
                    self.exporter.discard(staged_output)
                    raise
        except PipelineError as e:
            logger.error(f"Pipeline failed: {e.format()}")
            raise

        results = {
            'pipeline_status': 'completed',
            'input_file': self.input_file,
            'output_file': output_path,
            'report_directory': self.report_dir,
            'saved_files': saved_files,
            'stage_stats': stage_stats,
            'findings': findings,
            'findings_by_kind': findings_by_kind,
            'performance': monitor.summary,
        }

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)

        return results

    def _log_final_summary(self, results: dict) -> None:
        """Log final pipeline summary."""
        stats = results['stage_stats']

        logger.info("=" * 60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Input file: {results['input_file']}")
        logger.info(f"Rows loaded: {stats['rows_loaded']:,}")
        logger.info(f"Duplicates dropped: {stats['duplicates_dropped']:,}")
        logger.info(f"Dates swapped: {stats['dates_swapped']:,}")
        logger.info(f"Rows written: {stats['rows_written']:,}")
        logger.info(f"Findings: {len(results['findings'])}")
        for kind, count in sorted(results['findings_by_kind'].items()):
            logger.info(f"  {kind}: {count}")

        logger.info("Generated reports:")
        for report_name, file_path in results['saved_files'].items():
            logger.info(f"  - {report_name}: {file_path}")

        logger.info("=" * 60)
