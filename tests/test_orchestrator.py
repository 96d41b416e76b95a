# ========================
# tests/test_orchestrator.py
# ========================

import csv
import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest import mock

# Add the src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from order_cleaning.cli import main
from order_cleaning.pipeline.errors import MalformedRowError, PipelineIOError
from order_cleaning.pipeline.ingestion import load
from order_cleaning.pipeline.orchestrator import CleaningPipeline
from order_cleaning.utils.config import Config
from order_cleaning.utils.data_generator import OrderDataGenerator

DIRTY_CSV = """OrderID,ProductName,Category,OrderDate,DeliveryDate,Quantity,UnitPrice,TotalCost,Supplier,WarehouseLocation
1,Widget,Tools,2024-01-01,2024-01-05,10,2.50,25.00,Acme,Chicago
2,,Tools,2024-01-10,2024-01-03,4,2.50,10.00,Acme,Dallas
1,Widget,Tools,2024-01-01,2024-01-05,10,2.50,25.00,Acme,Chicago
3,Gadget,Electronics,2024-02-01,not-a-date,,5.00,,Globex,Reno
4,Gizmo,Electronics,2024-02-03,2024-02-10,-6,5.00,30.00,Globex,Reno
"""


def read_report(path):
    with open(path, newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


class TestCleaningPipeline(unittest.TestCase):
    """End-to-end runs of the cleaning pipeline."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.root = Path(self.tmp_dir.name)
        self.input_file = self.root / "orders.csv"
        self.output_file = self.root / "out" / "orders_clean.csv"

    def _run(self, content=DIRTY_CSV, config=None, **kwargs):
        self.input_file.write_text(content, encoding='utf-8')
        pipeline = CleaningPipeline(str(self.input_file), str(self.output_file), config=config, **kwargs)
        return pipeline.run()

    def test_full_run(self):
        results = self._run()

        self.assertEqual(results['pipeline_status'], 'completed')
        stats = results['stage_stats']
        self.assertEqual(stats['rows_loaded'], 5)
        self.assertEqual(stats['duplicates_dropped'], 1)
        self.assertEqual(stats['dates_swapped'], 1)
        self.assertEqual(stats['rows_written'], 4)
        self.assertEqual(results['findings_by_kind'], {
            'MissingValue': 2, 'InvalidDate': 1, 'NegativeQuantity': 1
        })

        cleaned = {r.order_id: r for r in load(self.output_file.read_bytes())}
        self.assertEqual(sorted(cleaned), [1, 2, 3, 4])
        self.assertEqual(cleaned[2].product_name, 'Unknown')
        self.assertEqual((cleaned[2].order_date, cleaned[2].delivery_date), (date(2024, 1, 3), date(2024, 1, 10)))
        # Median of the valid quantities {10, 4} is 7
        self.assertEqual(cleaned[3].quantity, 7)
        self.assertEqual(cleaned[3].total_cost, Decimal('35.00'))
        self.assertEqual(cleaned[4].quantity, 7)

    def test_reports(self):
        results = self._run()
        saved = results['saved_files']

        self.assertEqual(Path(results['report_directory']), self.output_file.parent / "reports")
        top = read_report(saved['top_selling_products'])
        self.assertEqual([row['product_name'] for row in top], ['Widget', 'Gadget', 'Gizmo', 'Unknown'])

        delayed = read_report(saved['most_delayed_orders'])
        self.assertEqual([row['order_id'] for row in delayed], ['2', '4', '1'])

        revenue = read_report(saved['revenue_by_category'])
        self.assertEqual(
            [(row['category'], Decimal(row['revenue'])) for row in revenue],
            [('Electronics', Decimal('65')), ('Tools', Decimal('35'))]
        )

        findings = read_report(saved['validation_findings'])
        self.assertEqual([row['row_index'] for row in findings], ['2', '4', '4', '5'])

        with open(saved['summary'], encoding='utf-8') as f:
            summary = json.load(f)
        self.assertEqual(summary['stage_stats']['rows_written'], 4)

    def test_top_n_and_dedupe_key_overrides(self):
        results = self._run(top_n=1, dedupe_key='Category', report_dir=str(self.root / "custom"))

        self.assertEqual(results['stage_stats']['rows_written'], 2)
        top = read_report(results['saved_files']['top_selling_products'])
        self.assertEqual(len(top), 1)
        self.assertTrue(results['saved_files']['summary'].startswith(str(self.root / "custom")))

    def test_malformed_row_aborts_without_output(self):
        content = DIRTY_CSV + "5,Broken,Tools\n"

        with self.assertRaises(MalformedRowError) as ctx:
            self._run(content)

        self.assertEqual(ctx.exception.row_index, 6)
        self.assertFalse(self.output_file.exists())

    def test_report_failure_leaves_no_output(self):
        """When the reports cannot be written the cleaned file is not published."""
        blocker = self.root / "reports_file"
        blocker.write_text("not a directory")

        with self.assertRaises(PipelineIOError) as ctx:
            self._run(report_dir=str(blocker))

        self.assertEqual(ctx.exception.stage, "report")
        self.assertFalse(self.output_file.exists())
        self.assertEqual(os.listdir(self.output_file.parent), [])

    def test_skip_malformed_rows(self):
        content = DIRTY_CSV + "5,Broken,Tools\n"

        results = self._run(content, config=Config({'skip_malformed_rows': True}))

        self.assertEqual(results['stage_stats']['rows_skipped'], 1)
        self.assertEqual(results['findings_by_kind']['MalformedRow'], 1)
        self.assertTrue(self.output_file.exists())

    def test_generated_dataset_invariants(self):
        """Output of a run over generated dirty data satisfies the cleaning invariants."""
        stats = OrderDataGenerator(seed=42).generate_dataset(
            str(self.input_file), num_rows=300, error_rate=0.3, duplicate_rate=0.1
        )
        results = CleaningPipeline(str(self.input_file), str(self.output_file)).run()

        self.assertEqual(results['stage_stats']['rows_loaded'], stats['total_rows'])
        self.assertEqual(results['stage_stats']['duplicates_dropped'], stats['duplicates_written'])

        cleaned = load(self.output_file.read_bytes())
        ids = [r.order_id for r in cleaned]
        self.assertEqual(len(ids), len(set(ids)))
        for record in cleaned:
            self.assertIsNotNone(record.product_name)
            self.assertGreaterEqual(record.quantity, 0)
            self.assertGreaterEqual(record.unit_price, 0)
            self.assertGreaterEqual(record.total_cost, 0)
            if record.has_known_dates():
                self.assertLessEqual(record.order_date, record.delivery_date)


class TestCommandLine(unittest.TestCase):
    """The ``clean`` command's exit codes and error output."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.root = Path(self.tmp_dir.name)

    def _main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv) + ['--log-level', 'CRITICAL'])
        return code, out.getvalue(), err.getvalue()

    def test_success(self):
        input_file = self.root / "orders.csv"
        input_file.write_text(DIRTY_CSV, encoding='utf-8')
        output_file = self.root / "clean.csv"

        code, out, err = self._main('--in', str(input_file), '--out', str(output_file), '--top-n', '2')

        self.assertEqual(code, 0)
        self.assertTrue(output_file.exists())
        self.assertIn("CLEANING SUMMARY", out)
        self.assertEqual(err, "")

    def test_missing_input(self):
        code, _, err = self._main('--in', str(self.root / "missing.csv"), '--out', str(self.root / "clean.csv"))

        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("load: IOError:"))
        self.assertFalse((self.root / "clean.csv").exists())

    def test_malformed_row(self):
        input_file = self.root / "orders.csv"
        input_file.write_text(DIRTY_CSV + "9,Broken\n", encoding='utf-8')

        code, _, err = self._main('--in', str(input_file), '--out', str(self.root / "clean.csv"))

        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("load: MalformedRowError: row 6"))

    def test_unwritable_report_dir(self):
        input_file = self.root / "orders.csv"
        input_file.write_text(DIRTY_CSV, encoding='utf-8')
        blocker = self.root / "reports_file"
        blocker.write_text("not a directory")

        code, _, err = self._main('--in', str(input_file), '--out', str(self.root / "clean.csv"),
                                  '--report-dir', str(blocker))

        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("report: IOError:"))
        self.assertFalse((self.root / "clean.csv").exists())

    def test_oversized_field(self):
        input_file = self.root / "orders.csv"
        input_file.write_text(DIRTY_CSV + "9," + "W" * 200000 + ",Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n",
                              encoding='utf-8')

        code, _, err = self._main('--in', str(input_file), '--out', str(self.root / "clean.csv"))

        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("load: MalformedRowError: row 6"))

    def test_invalid_environment_value(self):
        with mock.patch.dict(os.environ, {'CLEAN_TOP_N': 'many'}):
            code, _, err = self._main('--in', 'a.csv', '--out', 'b.csv')

        self.assertEqual(code, 2)
        self.assertTrue(err.startswith("cli: ConfigError:"))

    def test_invalid_dedupe_key(self):
        code, _, err = self._main('--in', 'a.csv', '--out', 'b.csv', '--dedupe-key', 'discount')

        self.assertEqual(code, 2)
        self.assertIn("ConfigError", err)


class TestConfig(unittest.TestCase):

    def test_defaults_and_overrides(self):
        config = Config({'top_n': 3, 'delimiter': ';'})

        self.assertEqual(config.TOP_N, 3)
        self.assertEqual(config.DELIMITER, ';')
        self.assertEqual(config.DEDUPE_KEY, 'order_id')
        self.assertEqual(config.invalid_settings(), [])

    def test_environment(self):
        with mock.patch.dict(os.environ, {'CLEAN_TOP_N': '8', 'CLEAN_SKIP_MALFORMED': 'true'}):
            config = Config()

        self.assertEqual(config.TOP_N, 8)
        self.assertTrue(config.SKIP_MALFORMED_ROWS)

    def test_invalid_values(self):
        config = Config({'delimiter': '::', 'top_n': -1, 'log_level': 'LOUD'})

        self.assertEqual(sorted(config.invalid_settings()), ['delimiter', 'log_level', 'top_n'])

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "config.json")
            Config({'top_n': 9}).save_to_file(path)

            self.assertEqual(Config.load_from_file(path).TOP_N, 9)


if __name__ == '__main__':
    unittest.main()
