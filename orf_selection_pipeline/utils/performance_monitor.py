#!/usr/bin/env python3

"""
Performance monitoring for the ORF selection pipeline.

Records elapsed time and resident memory for every executed stage.
"""

import time
import logging
import psutil
from dataclasses import dataclass
from typing import Optional, Dict, Any
from contextlib import contextmanager


@dataclass
class StageMetrics:
    """Container for per-stage metrics."""
    start_time: float
    end_time: Optional[float] = None
    peak_memory_mb: float = 0.0
    current_memory_mb: float = 0.0
    stage_name: str = ""

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        if self.end_time is None:
            return time.time() - self.start_time
        return self.end_time - self.start_time


class PerformanceMonitor:
    """Track wall time and memory of pipeline stages."""

    def __init__(self):
        self.start_time = time.time()
        self.stage_metrics: Dict[str, StageMetrics] = {}
        self.current_stage: Optional[str] = None
        self.process = psutil.Process()

    def get_memory_usage(self) -> float:
        """Get current memory usage of this process and its children in MB."""
        try:
            rss = self.process.memory_info().rss
            for child in self.process.children(recursive=True):
                try:
                    rss += child.memory_info().rss
                except psutil.NoSuchProcess:
                    continue
        except psutil.Error as e:
            logging.warning(f"Error getting memory usage: {e}")
            return 0.0

        memory_mb = rss / 1024 / 1024
        if self.current_stage and self.current_stage in self.stage_metrics:
            metrics = self.stage_metrics[self.current_stage]
            metrics.current_memory_mb = memory_mb
            metrics.peak_memory_mb = max(metrics.peak_memory_mb, memory_mb)
        return memory_mb

    def start_stage(self, stage_name: str) -> None:
        """Start monitoring a stage."""
        if self.current_stage:
            self.end_stage()

        self.current_stage = stage_name
        self.stage_metrics[stage_name] = StageMetrics(
            start_time=time.time(),
            stage_name=stage_name,
        )
        self.get_memory_usage()
        logging.info(f"Started stage: {stage_name}")

    def end_stage(self) -> Optional[StageMetrics]:
        """End the current stage and return its metrics."""
        if not self.current_stage:
            return None

        self.get_memory_usage()
        metrics = self.stage_metrics[self.current_stage]
        metrics.end_time = time.time()

        logging.info(f"Completed stage {self.current_stage} in {metrics.elapsed_time:.2f}s "
                     f"(peak memory: {metrics.peak_memory_mb:.1f}MB)")

        self.current_stage = None
        return metrics

    @contextmanager
    def stage_context(self, stage_name: str):
        """Context manager for monitoring a stage."""
        self.start_stage(stage_name)
        try:
            yield self.stage_metrics[stage_name]
        finally:
            self.end_stage()

    def get_total_elapsed_time(self) -> float:
        """Get total elapsed time since monitor creation."""
        return time.time() - self.start_time

    def get_peak_memory(self) -> float:
        """Get peak memory usage across all stages."""
        if not self.stage_metrics:
            return self.get_memory_usage()
        return max(metrics.peak_memory_mb for metrics in self.stage_metrics.values())

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get performance summary."""
        summary = {
            "total_elapsed_time": self.get_total_elapsed_time(),
            "peak_memory_mb": self.get_peak_memory(),
            "stages": {}
        }

        for stage_name, metrics in self.stage_metrics.items():
            summary["stages"][stage_name] = {
                "elapsed_time": metrics.elapsed_time,
                "peak_memory_mb": metrics.peak_memory_mb
            }

        return summary

    def log_performance_report(self) -> None:
        """Log performance report."""
        summary = self.get_performance_summary()

        logging.info("=" * 50)
        logging.info("PERFORMANCE REPORT")
        logging.info("=" * 50)
        logging.info(f"Total time: {summary['total_elapsed_time']:.2f} seconds")
        logging.info(f"Peak memory: {summary['peak_memory_mb']:.1f} MB")

        if summary['stages']:
            logging.info("Stage breakdown:")
            for stage_name, stage_data in summary['stages'].items():
                logging.info(f"  {stage_name}: {stage_data['elapsed_time']:.2f}s "
                             f"({stage_data['peak_memory_mb']:.1f}MB)")
