# ========================
# src/order_cleaning/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Generates order datasets with the kinds of problems the pipeline cleans up:
repeated orders, missing values, negative numbers and broken dates.
"""

import csv
import random
import logging
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import List, Dict, Any, Optional

from ..pipeline.records import COLUMN_TO_FIELD, DEFAULT_COLUMNS

logger = logging.getLogger(__name__)


class OrderDataGenerator:
    """
    Data generator for creating realistic, dirty order datasets.
    """

    ERROR_TYPES = [
        'missing_product_name', 'missing_quantity', 'negative_quantity',
        'negative_price', 'swapped_dates', 'unparseable_date', 'missing_total_cost'
    ]

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.rng = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"OrderDataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize the product catalog and supply chain patterns."""
        # Product catalog with realistic pricing
        self.products = [
            {"name": "Laptop Pro 15", "category": "Electronics", "base_price": 1200},
            {"name": "Smartphone X", "category": "Electronics", "base_price": 800},
            {"name": "Wireless Headphones", "category": "Electronics", "base_price": 150},
            {"name": "4K LED TV", "category": "Home Appliance", "base_price": 2000},
            {"name": "Blender Pro", "category": "Home Appliance", "base_price": 80},
            {"name": "Coffee Maker Elite", "category": "Home Appliance", "base_price": 120},
            {"name": "Men's T-shirt (Blue)", "category": "Fashion", "base_price": 25},
            {"name": "Running Shoes", "category": "Fashion", "base_price": 95},
            {"name": "Office Chair", "category": "Furniture", "base_price": 200},
            {"name": "Standing Desk", "category": "Furniture", "base_price": 450},
        ]

        self.suppliers = ["Acme Corp", "Global Traders", "Prime Wholesale", "Northwind Supply"]
        self.warehouses = ["Chicago", "Dallas", "Newark", "Reno", "Atlanta"]

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.15,
                         duplicate_rate: float = 0.05,
                         start_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate an order dataset with controlled error injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of distinct orders to generate
            error_rate (float): Fraction of orders with an injected error
            duplicate_rate (float): Fraction of orders written a second time
            start_date (date): Earliest order date

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} orders with {error_rate:.1%} error rate...")

        if start_date is None:
            start_date = date.today() - timedelta(days=365)

        stats = {
            'total_orders': num_rows,
            'total_rows': 0,
            'error_rate': error_rate,
            'duplicates_written': 0,
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(DEFAULT_COLUMNS)

            for i in range(num_rows):
                row = self._generate_single_record(1001 + i, start_date)
                if self.rng.random() < error_rate:
                    stats['records_with_errors'] += 1
                    self._inject_error(row, stats)
                writer.writerow(self._format_row(row))
                stats['total_rows'] += 1

                if self.rng.random() < duplicate_rate:
                    writer.writerow(self._format_row(row))
                    stats['duplicates_written'] += 1
                    stats['total_rows'] += 1

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0.0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Actual error rate: {stats['error_rate_actual']:.1%}")
        logger.info(f"Error breakdown: {stats['error_types']}")

        return stats

    def _generate_single_record(self, order_id: int, start_date: date) -> Dict[str, Any]:
        """Generate one clean order line."""
        product = self.rng.choice(self.products)

        order_date = start_date + timedelta(days=self.rng.randint(0, 365))
        delivery_date = order_date + timedelta(days=self.rng.randint(1, 21))

        quantity = self.rng.randint(1, 50)
        price_variation = Decimal(str(round(self.rng.uniform(0.8, 1.2), 2)))  # ±20% variation
        unit_price = (Decimal(product["base_price"]) * price_variation).quantize(Decimal("0.01"))

        return {
            'order_id': order_id,
            'product_name': product["name"],
            'category': product["category"],
            'order_date': order_date.isoformat(),
            'delivery_date': delivery_date.isoformat(),
            'quantity': quantity,
            'unit_price': unit_price,
            'total_cost': unit_price * quantity,
            'supplier': self.rng.choice(self.suppliers),
            'warehouse_location': self.rng.choice(self.warehouses),
        }

    def _inject_error(self, row: Dict[str, Any], stats: Dict[str, Any]) -> None:
        """Inject one kind of error into ``row``."""
        error_type = self.rng.choice(self.ERROR_TYPES)

        if error_type == 'missing_product_name':
            row['product_name'] = None
        elif error_type == 'missing_quantity':
            row['quantity'] = None
        elif error_type == 'negative_quantity':
            row['quantity'] = -row['quantity']
        elif error_type == 'negative_price':
            row['unit_price'] = -row['unit_price']
        elif error_type == 'swapped_dates':
            row['order_date'], row['delivery_date'] = row['delivery_date'], row['order_date']
        elif error_type == 'unparseable_date':
            row['delivery_date'] = self.rng.choice(["N/A", "31/02/2024", "2024-13-01", ""])
        elif error_type == 'missing_total_cost':
            row['total_cost'] = None

        self._track_error_type(stats, error_type)

    @staticmethod
    def _format_row(row: Dict[str, Any]) -> List[Any]:
        values = [row[COLUMN_TO_FIELD[column]] for column in DEFAULT_COLUMNS]
        return ["" if value is None else value for value in values]

    def _track_error_type(self, stats: Dict[str, Any], error_type: str) -> None:
        """Track error types for statistics."""
        if error_type not in stats['error_types']:
            stats['error_types'][error_type] = 0
        stats['error_types'][error_type] += 1
