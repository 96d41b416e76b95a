# ========================
# src/order_cleaning/pipeline/cleaning.py
# ========================

"""
Data Cleaning Module

Repairs the problems reported by the validator: fills missing product names
and quantities, fixes negative prices and derives missing totals.
"""

import logging
import statistics
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from .records import DECIMAL_FIELDS, Record, Table

logger = logging.getLogger(__name__)


def median_quantity(table: Table) -> Optional[Decimal]:
    """
    Median of the valid quantities in ``table``.

    Only present, non-negative quantities count. Even-sized samples use the
    midpoint of the two middle values. Returns None when nothing qualifies.
    """
    valid = [r.quantity for r in table if r.quantity is not None and r.quantity >= 0]
    if not valid:
        return None
    return Decimal(statistics.median(valid))


class RecordRepairer:
    """
    Applies the repair policy to each record of a table, in place.
    Each step handles one kind of validation finding.
    """

    def __init__(self, unknown_product_name: str = "Unknown"):
        """
        Initialize the repairer.

        Args:
            unknown_product_name (str): Value used to fill missing product names
        """
        self.unknown_product_name = unknown_product_name
        self.records_processed = 0
        self.product_names_filled = 0
        self.quantities_filled = 0
        self.prices_fixed = 0
        self.totals_derived = 0
        logger.info("RecordRepairer initialized")

    def repair(self, table: Table) -> Table:
        """
        Repair every record of ``table``.

        Args:
            table (Table): Deduplicated table

        Returns:
            Table: The same table with its records repaired
        """
        median = median_quantity(table)
        fill_quantity = None
        if median is not None:
            fill_quantity = int(median.quantize(Decimal(1), rounding=ROUND_HALF_UP))
            logger.info(f"Median quantity: {median} (fill value {fill_quantity})")
        else:
            logger.warning("No valid quantities in table; missing quantities stay empty")

        for record in table:
            self.repair_record(record, fill_quantity)
            self.records_processed += 1

        logger.info(f"Repair complete: {self.get_statistics()}")
        return table

    def repair_record(self, record: Record, fill_quantity: Optional[int]) -> None:
        if record.product_name is None:
            record.product_name = self.unknown_product_name
            self.product_names_filled += 1

        if (record.quantity is None or record.quantity < 0) and fill_quantity is not None:
            logger.debug(f"Row {record.source_row}: quantity {record.quantity} -> {fill_quantity}")
            record.quantity = fill_quantity
            self.quantities_filled += 1

        for name in DECIMAL_FIELDS:
            value = getattr(record, name)
            if value is not None and value < 0:
                setattr(record, name, -value)
                self.prices_fixed += 1

        if record.total_cost is None and record.quantity is not None and record.unit_price is not None:
            record.total_cost = record.unit_price * record.quantity
            self.totals_derived += 1

    def get_statistics(self) -> Dict[str, int]:
        """Get repair statistics."""
        return {
            'records_processed': self.records_processed,
            'product_names_filled': self.product_names_filled,
            'quantities_filled': self.quantities_filled,
            'prices_fixed': self.prices_fixed,
            'totals_derived': self.totals_derived,
        }


def repair(table: Table, unknown_product_name: str = "Unknown") -> Table:
    """Repair ``table`` with a fresh repairer."""
    return RecordRepairer(unknown_product_name).repair(table)
