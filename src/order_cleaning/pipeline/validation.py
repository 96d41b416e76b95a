# ========================
# src/order_cleaning/pipeline/validation.py
# ========================

"""
Validation Module

Scans a Table for missing required values, negative numbers and dates that
could not be parsed. Validation is diagnostic only: repairs happen in the
cleaning stage.
"""

import logging
from collections import Counter
from typing import List, Tuple

from .records import DATE_FIELDS, DECIMAL_FIELDS, Finding, FindingKind, Record, Table, UnparsedDate

logger = logging.getLogger(__name__)


class RecordValidator:
    """Produces Findings for every problem it sees; never mutates records."""

    REQUIRED_FIELDS = ('product_name', 'quantity')

    def __init__(self):
        self.records_checked = 0
        self.kind_counts = Counter()

    def validate(self, table: Table) -> Tuple[Table, List[Finding]]:
        """
        Validate every record of ``table``.

        Args:
            table (Table): Table to inspect

        Returns:
            tuple: The untouched table and the list of findings in row order
        """
        findings: List[Finding] = []
        for record in table:
            findings.extend(self.check_record(record))
            self.records_checked += 1

        self.kind_counts.update(finding.kind.value for finding in findings)
        logger.info(f"Validated {self.records_checked} records, {len(findings)} findings")
        for kind, count in sorted(self.kind_counts.items()):
            logger.info(f"  {kind}: {count}")
        return table, findings

    def check_record(self, record: Record) -> List[Finding]:
        findings = []
        row = record.source_row

        for name in self.REQUIRED_FIELDS:
            if getattr(record, name) is None:
                findings.append(Finding(row, name, FindingKind.MISSING_VALUE, f"{name} is missing"))

        if record.quantity is not None and record.quantity < 0:
            findings.append(Finding(
                row, 'quantity', FindingKind.NEGATIVE_QUANTITY, f"quantity is {record.quantity}"
            ))

        for name in DECIMAL_FIELDS:
            value = getattr(record, name)
            if value is not None and value < 0:
                findings.append(Finding(row, name, FindingKind.NEGATIVE_PRICE, f"{name} is {value}"))

        findings.extend(date_findings(record))
        return findings


def date_findings(record: Record) -> List[Finding]:
    """InvalidDate findings for each date field of ``record`` holding an unparsed value."""
    findings = []
    for name in DATE_FIELDS:
        value = getattr(record, name)
        if isinstance(value, UnparsedDate) or value is None:
            raw = value.raw if isinstance(value, UnparsedDate) else ""
            findings.append(Finding(
                record.source_row, name, FindingKind.INVALID_DATE, f"cannot parse {raw!r} as YYYY-MM-DD"
            ))
    return findings


def validate(table: Table) -> Tuple[Table, List[Finding]]:
    """Validate ``table`` with a fresh validator."""
    return RecordValidator().validate(table)
