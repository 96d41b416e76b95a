# ========================
# src/order_cleaning/pipeline/deduplication.py
# ========================

"""
Deduplication Module

Removes repeated records, keeping the first occurrence of every key.
"""

import logging
from operator import attrgetter
from typing import Any, Callable, Optional

from .records import COLUMN_TO_FIELD, FIELD_TO_COLUMN, Record, Table

logger = logging.getLogger(__name__)

KeyFunction = Callable[[Record], Any]


def key_for_field(name: str) -> KeyFunction:
    """
    Build a key function from a column name.

    Args:
        name (str): Header spelling (``OrderID``) or attribute spelling
                    (``order_id``), case-insensitive

    Raises:
        ValueError: If ``name`` is not a known column
    """
    wanted = name.strip().lower()
    for column, field_name in COLUMN_TO_FIELD.items():
        if wanted in (column.lower(), field_name):
            return attrgetter(field_name)
    raise ValueError(
        f"Unknown dedupe key {name!r}; expected one of: {', '.join(FIELD_TO_COLUMN)}"
    )


class Deduplicator:
    """Keep-first deduplication by a declared key (``order_id`` by default)."""

    def __init__(self, key_fn: Optional[KeyFunction] = None):
        self.key_fn = key_fn or attrgetter('order_id')
        self.duplicates_dropped = 0

    def dedupe(self, table: Table) -> Table:
        """
        Drop every record whose key was already seen at a smaller row index.

        Records are visited in source-row order so the survivor of each key
        is its earliest row even if the table was reordered upstream; the
        output keeps the input's relative order.
        """
        survivors = {}
        for position, record in enumerate(table.records):
            key = self.key_fn(record)
            current = survivors.get(key)
            if current is None or (record.source_row, position) < current[0]:
                survivors[key] = ((record.source_row, position), position)

        keep = {position for _, position in survivors.values()}
        kept = [record for position, record in enumerate(table.records) if position in keep]

        dropped = len(table) - len(kept)
        self.duplicates_dropped += dropped
        logger.info(f"Deduplication kept {len(kept)} of {len(table)} records ({dropped} duplicates dropped)")
        return table.with_records(kept)


def dedupe(table: Table, key_fn: Optional[KeyFunction] = None) -> Table:
    """Deduplicate ``table`` by ``key_fn`` (default ``order_id``)."""
    return Deduplicator(key_fn).dedupe(table)
