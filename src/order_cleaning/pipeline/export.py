# ========================
# src/order_cleaning/pipeline/export.py
# ========================

"""
Data Export Module

Serializes a Table back to the delimited format the loader reads.
"""

import csv
import io
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Union

from .errors import PipelineIOError
from .records import COLUMN_TO_FIELD, Table

logger = logging.getLogger(__name__)

STAGE = "export"


def format_value(value: Any) -> str:
    """Render one field the way the loader expects to read it back."""
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class OrderCSVExporter:
    """Writes tables with the header and row order they currently have."""

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def export(self, table: Table) -> bytes:
        """
        Serialize ``table``.

        Loading the result gives back equal records. The loader trims text
        fields, so padding around text values in records built in code does
        not survive the trip.

        Args:
            table (Table): Table to write

        Returns:
            bytes: UTF-8 delimited text, header first
        """
        buffer = io.StringIO(newline='')
        writer = csv.writer(buffer, delimiter=self.delimiter, lineterminator='\n')
        writer.writerow(table.columns)
        fields = [COLUMN_TO_FIELD[column] for column in table.columns]
        for record in table:
            writer.writerow([format_value(getattr(record, name)) for name in fields])
        return buffer.getvalue().encode('utf-8')

    def write(self, table: Table, file_path: Union[str, Path]) -> str:
        """
        Write ``table`` to ``file_path``.

        The content goes to a temporary file next to the target first, which
        is then renamed over it; a failed write leaves no partial output.
        """
        tmp_path = self.stage(table, file_path)
        return self.commit(tmp_path, file_path)

    def stage(self, table: Table, file_path: Union[str, Path]) -> Path:
        """
        Write ``table`` to a temporary sibling of ``file_path``.

        Returns:
            Path: The temporary file, to be passed to ``commit`` or ``discard``
        """
        path = Path(file_path)
        data = self.export(table)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'wb') as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Error writing output file {path}: {e}")
            self.discard(tmp_path)
            raise PipelineIOError(STAGE, f"cannot write '{path}': {e.strerror or e}") from e

        logger.debug(f"Staged {len(table)} records in {tmp_path}")
        return tmp_path

    def commit(self, tmp_path: Path, file_path: Union[str, Path]) -> str:
        """Rename a staged file over ``file_path``."""
        path = Path(file_path)
        try:
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error writing output file {path}: {e}")
            self.discard(tmp_path)
            raise PipelineIOError(STAGE, f"cannot write '{path}': {e.strerror or e}") from e

        logger.info(f"Saved output to {path}")
        return str(path)

    @staticmethod
    def discard(tmp_path: Path) -> None:
        """Remove a staged file that will not be committed."""
        if tmp_path.exists():
            tmp_path.unlink()


def export(table: Table, delimiter: str = ",") -> bytes:
    """Serialize ``table`` with a one-off exporter."""
    return OrderCSVExporter(delimiter).export(table)
