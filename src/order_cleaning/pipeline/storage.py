# ========================
# src/order_cleaning/pipeline/storage.py
# ========================

"""
Report Storage Module

Saves the aggregate reports and the findings of a run next to the cleaned output.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .errors import PipelineIOError
from .export import format_value
from .records import Finding

logger = logging.getLogger(__name__)

STAGE = "report"


class ReportSaver:
    """
    Saves the reports produced from an OrderAggregator plus the findings list.
    """

    def __init__(self, report_dir: str = "reports"):
        """
        Initialize the report saver.

        Args:
            report_dir (str): Directory to save report files
        """
        self.report_dir = Path(report_dir)
        logger.info(f"ReportSaver initialized with report directory: {self.report_dir}")

    def save_all(self, aggregator, findings: List[Finding], summary: Dict[str, Any],
                 top_n: int) -> Dict[str, str]:
        """
        Save all reports.

        Args:
            aggregator: OrderAggregator over the cleaned table
            findings (list): Non-fatal findings of the run
            summary (dict): Run summary written as JSON
            top_n (int): Row limit for the ranked reports

        Returns:
            dict: Mapping of report name to saved file path
        """
        try:
            self.report_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create report directory {self.report_dir}: {e}")
            raise PipelineIOError(STAGE, f"cannot create '{self.report_dir}': {e.strerror or e}") from e

        saved_files = {
            'top_selling_products': self.save_top_selling_products(aggregator.top_selling_products(top_n)),
            'most_delayed_orders': self.save_most_delayed_orders(aggregator.most_delayed_orders(top_n)),
            'revenue_by_category': self.save_revenue_by_category(aggregator.revenue_by_category()),
            'validation_findings': self.save_findings(findings),
        }
        saved_files['summary'] = self._save_summary(summary)

        logger.info(f"All reports saved successfully to {len(saved_files)} files")
        return saved_files

    def save_top_selling_products(self, rows: List[Dict[str, Any]]) -> str:
        file_path = self.report_dir / "top_selling_products.csv"
        self._write_csv(file_path, ['product_name', 'total_quantity'], rows)
        return str(file_path)

    def save_most_delayed_orders(self, rows: List[Dict[str, Any]]) -> str:
        file_path = self.report_dir / "most_delayed_orders.csv"
        headers = ['order_id', 'product_name', 'order_date', 'delivery_date', 'delay_days']
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def save_revenue_by_category(self, rows: List[Dict[str, Any]]) -> str:
        file_path = self.report_dir / "revenue_by_category.csv"
        self._write_csv(file_path, ['category', 'revenue'], rows)
        return str(file_path)

    def save_findings(self, findings: List[Finding]) -> str:
        """Save the validation findings, one row per finding."""
        file_path = self.report_dir / "validation_findings.csv"
        headers = ['row_index', 'field', 'kind', 'detail']
        self._write_csv(file_path, headers, [finding.to_dict() for finding in findings])
        return str(file_path)

    def _save_summary(self, summary_data: Dict[str, Any]) -> str:
        """Save the run summary as JSON."""
        file_path = self.report_dir / "run_summary.json"

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            logger.error(f"Error writing summary {file_path}: {e}")
            raise PipelineIOError(STAGE, f"cannot write '{file_path}': {e.strerror or e}") from e

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        """Write data to CSV file."""
        rows = [{key: format_value(item.get(key)) for key in headers} for item in data_items]
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers)
                writer.writeheader()
                writer.writerows(rows)

            logger.info(f"Saved {len(rows)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise PipelineIOError(STAGE, f"cannot write '{file_path}': {e.strerror or e}") from e
