# ========================
# src/order_cleaning/pipeline/__init__.py
# ========================

"""
Cleaning Pipeline Package

This package contains all stages of the order cleaning pipeline:
- ingestion: CSV loading into an in-memory table
- validation: Diagnostic checks producing findings
- deduplication: Keep-first duplicate removal
- cleaning: Repair of missing and invalid values
- dates: Order/delivery date reconciliation
- export: CSV serialization of the cleaned table
- transformation: Aggregate reports
- storage: Report output
- orchestrator: Pipeline coordination
"""

from .records import Finding, FindingKind, Record, Table, UnparsedDate
from .errors import MalformedHeaderError, MalformedRowError, PipelineError, PipelineIOError
from .ingestion import OrderCSVLoader, load
from .validation import RecordValidator, validate
from .deduplication import Deduplicator, dedupe, key_for_field
from .cleaning import RecordRepairer, repair
from .dates import DateReconciler, reconcile_dates
from .export import OrderCSVExporter, export
from .transformation import OrderAggregator
from .storage import ReportSaver
from .orchestrator import CleaningPipeline

__all__ = [
    'Finding',
    'FindingKind',
    'Record',
    'Table',
    'UnparsedDate',
    'MalformedHeaderError',
    'MalformedRowError',
    'PipelineError',
    'PipelineIOError',
    'OrderCSVLoader',
    'load',
    'RecordValidator',
    'validate',
    'Deduplicator',
    'dedupe',
    'key_for_field',
    'RecordRepairer',
    'repair',
    'DateReconciler',
    'reconcile_dates',
    'OrderCSVExporter',
    'export',
    'OrderAggregator',
    'ReportSaver',
    'CleaningPipeline',
]
