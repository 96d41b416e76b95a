# ========================
# src/order_cleaning/pipeline/transformation.py
# ========================

"""
Data Transformation Module

Read-only aggregate reports over the cleaned order table.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .records import Record, Table

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "Unknown"


class OrderAggregator:
    """
    Computes grouped summaries over a cleaned Table.
    Group totals are accumulated once; each query only sorts and slices them.
    """

    def __init__(self, table: Optional[Table] = None):
        """
        Initialize the aggregator.

        Args:
            table (Table): Optional cleaned table to aggregate right away
        """
        self._reset_aggregations()
        if table is not None:
            self.process_table(table)

    def _reset_aggregations(self):
        """Reset all aggregation data structures."""
        self.product_quantities = defaultdict(int)
        self.category_revenue = defaultdict(Decimal)
        self.delays: List[Dict[str, Any]] = []
        self.records_processed = 0
        self.records_without_dates = 0

    def process_table(self, table: Table) -> None:
        """Accumulate every record of ``table``."""
        for record in table:
            self._process_single_record(record)
            self.records_processed += 1
        logger.info(f"Aggregated {self.records_processed} records")
        self._log_summary_statistics()

    def _process_single_record(self, record: Record) -> None:
        product_name = record.product_name or UNKNOWN_GROUP
        category = record.category or UNKNOWN_GROUP

        self.product_quantities[product_name] += record.quantity or 0
        # Categories with no known cost still get a (zero) row
        self.category_revenue[category] += record.total_cost or Decimal(0)

        if record.has_known_dates():
            self.delays.append({
                'order_id': record.order_id,
                'product_name': record.product_name,
                'order_date': record.order_date,
                'delivery_date': record.delivery_date,
                'delay_days': (record.delivery_date - record.order_date).days,
            })
        else:
            self.records_without_dates += 1

    def top_selling_products(self, n: int) -> List[Dict[str, Any]]:
        """
        Products ranked by total quantity sold.

        Ties are broken by ascending product name. Fewer than ``n`` rows are
        returned when there are fewer products.
        """
        _check_limit(n)
        ranked = sorted(self.product_quantities.items(), key=lambda item: (-item[1], item[0]))
        return [{'product_name': name, 'total_quantity': qty} for name, qty in ranked[:n]]

    def most_delayed_orders(self, n: int) -> List[Dict[str, Any]]:
        """Orders ranked by days between order and delivery, ties by ascending order_id."""
        _check_limit(n)
        ranked = sorted(self.delays, key=lambda row: (-row['delay_days'], row['order_id']))
        return [dict(row) for row in ranked[:n]]

    def revenue_by_category(self) -> List[Dict[str, Any]]:
        """Total cost per category, largest first, ties by ascending category."""
        ranked = sorted(self.category_revenue.items(), key=lambda item: (-item[1], item[0]))
        return [{'category': category, 'revenue': revenue} for category, revenue in ranked]

    def _log_summary_statistics(self) -> None:
        logger.info(f"Unique products: {len(self.product_quantities)}")
        logger.info(f"Categories: {len(self.category_revenue)}")
        logger.info(f"Records with delay information: {len(self.delays)}")
        if self.records_without_dates:
            logger.info(f"Records excluded from delay ranking: {self.records_without_dates}")

    def get_aggregation_summary(self) -> Dict[str, Any]:
        """Get a summary of all aggregations."""
        return {
            'records_processed': self.records_processed,
            'unique_products': len(self.product_quantities),
            'categories': len(self.category_revenue),
            'orders_with_delay': len(self.delays),
            'orders_without_dates': self.records_without_dates,
        }


def _check_limit(n: int) -> None:
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
