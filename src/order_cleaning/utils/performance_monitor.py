# ========================
# src/order_cleaning/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks elapsed time and memory of a pipeline run, with one checkpoint per stage.
"""

import os
import time
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the cleaning pipeline.
    Tracks memory usage, processing time, and throughput.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.checkpoints = []
        self.summary: Optional[Dict[str, Any]] = None
        self._process = psutil.Process(os.getpid())

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.info(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def add_checkpoint(self, name: str, records: int, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Record the end of a stage.

        Args:
            name (str): Stage name
            records (int): Number of records in the table after the stage
            metadata (dict): Optional metadata to store
        """
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        self.records_processed = max(self.records_processed, records)

        checkpoint = {
            'name': name,
            'elapsed_seconds': time.time() - self.start_time if self.start_time else 0.0,
            'memory_mb': memory_mb,
            'records': records,
            'metadata': metadata or {}
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        total_time = self.end_time - self.start_time if self.start_time else 0
        throughput = self.records_processed / total_time if total_time > 0 else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'records_processed': self.records_processed,
            'average_throughput_records_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints
        }

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        logger.info("=" * 60)
        logger.info(f"PERFORMANCE SUMMARY - {summary['name']}")
        logger.info(f"Total processing time: {summary['total_processing_time_seconds']:.2f} seconds")
        logger.info(f"Records processed: {summary['records_processed']:,}")
        logger.info(f"Average throughput: {summary['average_throughput_records_per_second']:.0f} records/second")
        logger.info(f"Peak memory usage: {summary['peak_memory_usage_mb']:.2f} MB")
        for checkpoint in summary['checkpoints']:
            logger.info(
                f"  {checkpoint['name']}: {checkpoint['records']:,} records "
                f"at {checkpoint['elapsed_seconds']:.3f}s"
            )
        logger.info("=" * 60)

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory in MB."""
        try:
            memory_bytes = self._process.memory_info().rss
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return 0.0
        return memory_bytes / (1024 * 1024)


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.summary = monitor.stop_monitoring()
