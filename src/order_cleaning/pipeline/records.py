# ========================
# src/order_cleaning/pipeline/records.py
# ========================

"""
Record Model

In-memory representation of the order dataset: one Record per order line,
a Table holding the records of a single run, and the Finding type used for
non-fatal validation observations.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union

# Input header order; the exporter falls back to it for tables built in code
DEFAULT_COLUMNS = [
    'OrderID', 'ProductName', 'Category', 'OrderDate', 'DeliveryDate',
    'Quantity', 'UnitPrice', 'TotalCost', 'Supplier', 'WarehouseLocation'
]

COLUMN_TO_FIELD = {
    'OrderID': 'order_id',
    'ProductName': 'product_name',
    'Category': 'category',
    'OrderDate': 'order_date',
    'DeliveryDate': 'delivery_date',
    'Quantity': 'quantity',
    'UnitPrice': 'unit_price',
    'TotalCost': 'total_cost',
    'Supplier': 'supplier',
    'WarehouseLocation': 'warehouse_location',
}

FIELD_TO_COLUMN = {v: k for k, v in COLUMN_TO_FIELD.items()}

DECIMAL_FIELDS = ('unit_price', 'total_cost')
DATE_FIELDS = ('order_date', 'delivery_date')

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class UnparsedDate:
    """Placeholder for a date field whose text could not be parsed."""

    raw: str

    def __str__(self) -> str:
        return self.raw


DateValue = Union[date, UnparsedDate]


@dataclass
class Record:
    """One order line."""

    order_id: int
    product_name: Optional[str] = None
    category: Optional[str] = None
    order_date: Optional[DateValue] = None
    delivery_date: Optional[DateValue] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    supplier: Optional[str] = None
    warehouse_location: Optional[str] = None
    # 1-based data row in the source file, header excluded
    source_row: int = field(default=0, compare=False)

    def has_known_dates(self) -> bool:
        """True when both dates parsed successfully."""
        return isinstance(self.order_date, date) and isinstance(self.delivery_date, date)


@dataclass
class Table:
    """Ordered records of one pipeline run together with their column header."""

    records: List[Record] = field(default_factory=list)
    columns: List[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def with_records(self, records: List[Record]) -> 'Table':
        """Return a table over ``records`` that keeps this table's header."""
        return Table(records=records, columns=list(self.columns))


class FindingKind(str, Enum):
    MISSING_VALUE = "MissingValue"
    NEGATIVE_QUANTITY = "NegativeQuantity"
    NEGATIVE_PRICE = "NegativePrice"
    INVALID_DATE = "InvalidDate"
    MALFORMED_ROW = "MalformedRow"


@dataclass(frozen=True)
class Finding:
    """A non-fatal observation about one field of one source row."""

    row_index: int
    field: str
    kind: FindingKind
    detail: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            'row_index': self.row_index,
            'field': self.field,
            'kind': self.kind.value,
            'detail': self.detail,
        }


def merge_findings(*groups: List[Finding]) -> List[Finding]:
    """Concatenate finding lists, dropping repeats while keeping first-seen order."""
    seen = set()
    merged = []
    for group in groups:
        for finding in group:
            if finding in seen:
                continue
            seen.add(finding)
            merged.append(finding)
    return merged
