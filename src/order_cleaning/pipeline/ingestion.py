# ========================
# src/order_cleaning/pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Reads a delimited order file into an in-memory Table. The whole file is held
in memory; the dataset sizes this tool targets do not call for chunking.
"""

import csv
import io
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import MalformedHeaderError, MalformedRowError, PipelineIOError
from .records import (
    COLUMN_TO_FIELD, DATE_FIELDS, DATE_FORMAT, DECIMAL_FIELDS, FIELD_TO_COLUMN,
    Finding, FindingKind, Record, Table, UnparsedDate,
)

logger = logging.getLogger(__name__)

STAGE = "load"

# Accept both the CSV header spelling and the attribute spelling, any case
_HEADER_LOOKUP = {
    **{column.lower(): column for column in COLUMN_TO_FIELD},
    **{name.lower(): column for name, column in FIELD_TO_COLUMN.items()},
}


class OrderCSVLoader:
    """
    Parses delimited order rows into Records.

    Only the declared column types are applied: integers for OrderID and
    Quantity, decimals for the money columns, text elsewhere. Dates that do
    not parse become ``UnparsedDate`` values for the validator to flag.
    """

    def __init__(self, delimiter: str = ",", skip_malformed: bool = False):
        """
        Initialize the loader.

        Args:
            delimiter (str): Field delimiter
            skip_malformed (bool): Skip rows that do not match the header
                                   and report them instead of failing
        """
        self.delimiter = delimiter
        self.skip_malformed = skip_malformed
        self.header: List[str] = []
        self.skipped_rows: List[Finding] = []
        logger.info(f"Initialized OrderCSVLoader (delimiter={delimiter!r}, skip_malformed={skip_malformed})")

    def load_file(self, file_path: Union[str, Path]) -> Table:
        """Read and parse the file at ``file_path``."""
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.error(f"Cannot read source file '{file_path}': {e}")
            raise PipelineIOError(STAGE, f"cannot read '{file_path}': {e.strerror or e}") from e

        logger.info(f"Read {len(data):,} bytes from {file_path}")
        return self.load_bytes(data)

    def load_bytes(self, data: bytes) -> Table:
        """
        Parse a byte stream of delimited rows.

        Args:
            data (bytes): UTF-8 encoded content, header row first

        Returns:
            Table: Parsed records in source order
        """
        try:
            text = data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            logger.error(f"Source is not valid UTF-8: {e}")
            raise PipelineIOError(STAGE, f"source is not valid UTF-8: {e.reason}") from e

        reader = csv.reader(io.StringIO(text, newline=''), delimiter=self.delimiter)

        try:
            header_row = _next_row(reader)
        except csv.Error as e:
            raise MalformedHeaderError(STAGE, f"unreadable header row: {e}") from e
        if header_row is None:
            raise MalformedHeaderError(STAGE, "source is empty, expected a header row")

        self.header = self._resolve_header(header_row)
        self.skipped_rows = []
        logger.info(f"CSV header: {self.header}")

        records = []
        row_index = 0
        while True:
            row_index += 1
            try:
                try:
                    row = _next_row(reader)
                except csv.Error as e:
                    raise MalformedRowError(row_index, f"unreadable row: {e}") from e
                if row is None:
                    break
                records.append(self._parse_row(row_index, row))
            except MalformedRowError as e:
                if not self.skip_malformed:
                    logger.error(f"Malformed row {row_index}: {e.detail}")
                    raise
                logger.warning(f"Skipping malformed row {row_index}: {e.detail}")
                self.skipped_rows.append(
                    Finding(row_index, 'row', FindingKind.MALFORMED_ROW, e.detail)
                )

        logger.info(f"Total rows loaded: {len(records)} (skipped: {len(self.skipped_rows)})")
        return Table(records=records, columns=list(self.header))

    def _resolve_header(self, header_row: List[str]) -> List[str]:
        """Map raw header names onto canonical column names."""
        columns = []
        for raw_name in header_row:
            column = _HEADER_LOOKUP.get(raw_name.strip().lower())
            if column is None:
                raise MalformedHeaderError(STAGE, f"unknown column {raw_name.strip()!r}")
            if column in columns:
                raise MalformedHeaderError(STAGE, f"duplicate column {column!r}")
            columns.append(column)

        missing = [column for column in COLUMN_TO_FIELD if column not in columns]
        if missing:
            raise MalformedHeaderError(STAGE, f"missing columns: {', '.join(missing)}")
        return columns

    def _parse_row(self, row_index: int, row: List[str]) -> Record:
        if len(row) != len(self.header):
            raise MalformedRowError(
                row_index, f"expected {len(self.header)} fields, found {len(row)}"
            )

        raw: Dict[str, str] = {
            COLUMN_TO_FIELD[column]: value.strip() for column, value in zip(self.header, row)
        }

        try:
            order_id = int(raw['order_id'])
        except ValueError:
            raise MalformedRowError(row_index, f"OrderID {raw['order_id']!r} is not an integer")

        values = {
            'product_name': raw['product_name'] or None,
            'category': raw['category'] or None,
            'supplier': raw['supplier'] or None,
            'warehouse_location': raw['warehouse_location'] or None,
            'quantity': _parse_int(raw['quantity']),
        }
        for name in DECIMAL_FIELDS:
            values[name] = _parse_decimal(raw[name])
        for name in DATE_FIELDS:
            values[name] = parse_date(raw[name])

        return Record(order_id=order_id, source_row=row_index, **values)


def _next_row(reader) -> Optional[List[str]]:
    """Next non-blank row, or None once the reader is exhausted."""
    for row in reader:
        if row:
            return row
    return None


def _parse_int(value: str) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug(f"Unparseable integer: {value!r}")
        return None


def _parse_decimal(value: str) -> Optional[Decimal]:
    if not value:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        logger.debug(f"Unparseable decimal: {value!r}")
        return None
    return number if number.is_finite() else None


def parse_date(value: str):
    """Parse a ``YYYY-MM-DD`` string, returning ``UnparsedDate`` on failure."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return UnparsedDate(value)


def load(data: bytes, delimiter: str = ",", skip_malformed: bool = False) -> Table:
    """Parse ``data`` with a one-off loader."""
    return OrderCSVLoader(delimiter=delimiter, skip_malformed=skip_malformed).load_bytes(data)
