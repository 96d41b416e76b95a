# ========================
# src/order_cleaning/pipeline/dates.py
# ========================

"""
Date Reconciliation Module

Repairs records whose order date falls after their delivery date.
"""

import logging
from typing import List

from .records import Finding, Table
from .validation import date_findings

logger = logging.getLogger(__name__)


class DateReconciler:
    """
    Swaps order and delivery dates that are out of order.

    The earlier of the two dates is taken to be the order date; the
    reconciler does not try to tell which field was actually wrong.
    Records with an unparsed date are flagged and left alone.
    """

    def __init__(self):
        self.records_swapped = 0
        self.findings: List[Finding] = []

    def reconcile_dates(self, table: Table) -> Table:
        for record in table:
            if not record.has_known_dates():
                self.findings.extend(date_findings(record))
                continue

            if record.order_date > record.delivery_date:
                logger.debug(
                    f"Order {record.order_id}: swapping order_date {record.order_date} "
                    f"and delivery_date {record.delivery_date}"
                )
                record.order_date, record.delivery_date = record.delivery_date, record.order_date
                self.records_swapped += 1

        logger.info(
            f"Date reconciliation: {self.records_swapped} records swapped, "
            f"{len(self.findings)} unparsed dates left untouched"
        )
        return table


def reconcile_dates(table: Table) -> Table:
    """Reconcile ``table`` with a fresh reconciler."""
    return DateReconciler().reconcile_dates(table)
