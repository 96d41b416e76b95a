# ========================
# src/order_cleaning/pipeline/errors.py
# ========================

"""
Pipeline Errors

Fatal error types raised by the pipeline stages. Each error knows the stage
it came from so the CLI can report it as ``<stage>: <ErrorKind>: <detail>``.
"""


class PipelineError(Exception):
    """Base class for all fatal pipeline errors."""

    kind = "PipelineError"

    def __init__(self, stage: str, detail: str):
        super().__init__(detail)
        self.stage = stage
        self.detail = detail

    def format(self) -> str:
        """Render the error in the ``<stage>: <ErrorKind>: <detail>`` form."""
        return f"{self.stage}: {self.kind}: {self.detail}"


class PipelineIOError(PipelineError):
    """The source could not be read or the sink could not be written."""

    kind = "IOError"


class MalformedHeaderError(PipelineError):
    """The header row is missing or does not name the expected columns."""

    kind = "MalformedHeaderError"


class MalformedRowError(PipelineError):
    """
    A data row does not match the header shape.

    Args:
        row_index (int): 1-based index of the offending data row
        detail (str): Human readable description
        stage (str): Stage that detected the problem
    """

    kind = "MalformedRowError"

    def __init__(self, row_index: int, detail: str, stage: str = "load"):
        super().__init__(stage, f"row {row_index}: {detail}")
        self.row_index = row_index
