"""
Order Cleaning Pipeline

Batch cleaning of order-line CSV data: load, validate, deduplicate, repair,
reconcile dates, export and report.
"""

__version__ = "1.0.0"
