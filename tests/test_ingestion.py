# ========================
# tests/test_ingestion.py
# ========================

import unittest
import tempfile
import os
import sys
from datetime import date
from decimal import Decimal

# Add the src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from order_cleaning.pipeline.errors import MalformedHeaderError, MalformedRowError, PipelineIOError
from order_cleaning.pipeline.ingestion import OrderCSVLoader, load
from order_cleaning.pipeline.records import DEFAULT_COLUMNS, FindingKind, UnparsedDate

HEADER = "OrderID,ProductName,Category,OrderDate,DeliveryDate,Quantity,UnitPrice,TotalCost,Supplier,WarehouseLocation\n"


class TestOrderLoader(unittest.TestCase):
    """Test the CSV ingestion module."""

    def test_load_typed_record(self):
        """Declared column types are applied to every field."""
        data = (HEADER + "1001,Laptop Pro 15,Electronics,2024-01-15,2024-01-20,2,1199.99,2399.98,Acme Corp,Chicago\n").encode()

        table = load(data)

        self.assertEqual(len(table), 1)
        record = table.records[0]
        self.assertEqual(record.order_id, 1001)
        self.assertEqual(record.product_name, 'Laptop Pro 15')
        self.assertEqual(record.order_date, date(2024, 1, 15))
        self.assertEqual(record.delivery_date, date(2024, 1, 20))
        self.assertEqual(record.quantity, 2)
        self.assertEqual(record.unit_price, Decimal('1199.99'))
        self.assertEqual(record.total_cost, Decimal('2399.98'))
        self.assertEqual(record.warehouse_location, 'Chicago')
        self.assertEqual(record.source_row, 1)
        self.assertEqual(table.columns, DEFAULT_COLUMNS)

    def test_empty_and_invalid_numbers_become_missing(self):
        """Empty or non-numeric quantity and price fields load as None."""
        data = (HEADER +
                "1,,Tools,2024-01-01,2024-01-02,,abc,,Acme,Reno\n"
                "2,Widget,Tools,2024-01-01,2024-01-02,12 units,1.50,NaN,Acme,Reno\n").encode()

        table = load(data)

        first, second = table.records
        self.assertIsNone(first.product_name)
        self.assertIsNone(first.quantity)
        self.assertIsNone(first.unit_price)
        self.assertIsNone(first.total_cost)
        self.assertIsNone(second.quantity)
        self.assertIsNone(second.total_cost)

    def test_unparseable_dates_become_sentinels(self):
        """Bad dates are kept as UnparsedDate instead of failing the load."""
        data = (HEADER + "1,Widget,Tools,31/02/2024,,1,1.00,1.00,Acme,Reno\n").encode()

        record = load(data).records[0]

        self.assertEqual(record.order_date, UnparsedDate('31/02/2024'))
        self.assertEqual(record.delivery_date, UnparsedDate(''))
        self.assertFalse(record.has_known_dates())

    def test_field_count_mismatch_is_fatal(self):
        """A short row raises MalformedRowError naming its 1-based index."""
        data = (HEADER +
                "1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n"
                "2,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme\n").encode()

        with self.assertRaises(MalformedRowError) as ctx:
            load(data)

        self.assertEqual(ctx.exception.row_index, 2)
        self.assertTrue(ctx.exception.format().startswith("load: MalformedRowError: row 2"))

    def test_skip_malformed_rows(self):
        """With skip_malformed the bad row is reported and the rest loads."""
        data = (HEADER +
                "1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n"
                "2,Widget,Tools,2024-01-01\n"
                "3,Gadget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()
        loader = OrderCSVLoader(skip_malformed=True)

        table = loader.load_bytes(data)

        self.assertEqual([r.order_id for r in table], [1, 3])
        self.assertEqual([r.source_row for r in table], [1, 3])
        self.assertEqual(len(loader.skipped_rows), 1)
        self.assertEqual(loader.skipped_rows[0].row_index, 2)
        self.assertEqual(loader.skipped_rows[0].kind, FindingKind.MALFORMED_ROW)

    def test_oversized_field_is_malformed(self):
        """A field the csv reader refuses is a MalformedRowError, not a csv.Error."""
        data = (HEADER +
                "1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n"
                "2," + "W" * 200000 + ",Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()

        with self.assertRaises(MalformedRowError) as ctx:
            load(data)

        self.assertEqual(ctx.exception.row_index, 2)
        self.assertTrue(ctx.exception.format().startswith("load: MalformedRowError: row 2: unreadable row"))

    def test_oversized_field_is_skipped(self):
        data = (HEADER +
                "1," + "W" * 200000 + ",Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n"
                "2,Gadget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()
        loader = OrderCSVLoader(skip_malformed=True)

        table = loader.load_bytes(data)

        self.assertEqual([r.order_id for r in table], [2])
        self.assertEqual([f.row_index for f in loader.skipped_rows], [1])

    def test_non_integer_order_id_is_malformed(self):
        data = (HEADER + "ORD-1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()

        with self.assertRaises(MalformedRowError):
            load(data)

    def test_header_in_different_order(self):
        """Columns are matched by name and their input order is kept."""
        header = "ProductName,OrderID,Category,OrderDate,DeliveryDate,Quantity,UnitPrice,TotalCost,Supplier,WarehouseLocation\n"
        data = (header + "Widget,7,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()

        table = load(data)

        self.assertEqual(table.records[0].order_id, 7)
        self.assertEqual(table.records[0].product_name, 'Widget')
        self.assertEqual(table.columns[:2], ['ProductName', 'OrderID'])

    def test_header_errors(self):
        """Missing, unknown or absent headers are fatal."""
        with self.assertRaises(MalformedHeaderError):
            load(b"OrderID,ProductName\n1,Widget\n")
        with self.assertRaises(MalformedHeaderError):
            load((HEADER.strip() + ",Discount\n").encode())
        with self.assertRaises(MalformedHeaderError):
            load(b"")

    def test_custom_delimiter_and_bom(self):
        data = ("\ufeff" + HEADER.replace(",", ";") +
                "5;Widget;Tools;2024-03-01;2024-03-04;3;2.00;6.00;Acme;Reno\n").encode('utf-8')

        table = load(data, delimiter=";")

        self.assertEqual(table.records[0].order_id, 5)
        self.assertEqual(table.records[0].total_cost, Decimal('6.00'))

    def test_blank_lines_are_ignored(self):
        data = (HEADER + "\n1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n\n").encode()

        table = load(data)

        self.assertEqual(len(table), 1)

    def test_load_file(self):
        """Loading from disk matches loading the same bytes."""
        data = (HEADER + "1,Widget,Tools,2024-01-01,2024-01-02,1,1.00,1.00,Acme,Reno\n").encode()
        with tempfile.NamedTemporaryFile(suffix='.csv', delete=False) as f:
            f.write(data)
            temp_file_path = f.name

        try:
            table = OrderCSVLoader().load_file(temp_file_path)
            self.assertEqual(table.records, load(data).records)
        finally:
            os.unlink(temp_file_path)

    def test_file_not_found(self):
        """A missing source is an IOError from the load stage."""
        loader = OrderCSVLoader()

        with self.assertRaises(PipelineIOError) as ctx:
            loader.load_file("non_existent_file.csv")

        self.assertTrue(ctx.exception.format().startswith("load: IOError:"))


if __name__ == '__main__':
    unittest.main()
