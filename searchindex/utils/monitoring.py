"""
Monitoring and metrics collection for the search index.
"""

import time
import logging
import threading
from typing import Dict, Optional, Any

from prometheus_client import Counter, CollectorRegistry, generate_latest
from prometheus_client import start_http_server


COUNTERS = {
    'files_indexed_total': 'Total number of text files indexed',
    'files_failed_total': 'Total number of text files that could not be read',
    'pages_crawled_total': 'Total number of web pages indexed',
    'pages_failed_total': 'Total number of web pages without usable content',
    'tasks_failed_total': 'Total number of work queue tasks that raised',
    'queries_processed_total': 'Total number of distinct queries searched',
}


class MetricsCollector:
    """Collects counters in a private Prometheus registry and mirrors them in memory."""

    def __init__(self, enable_prometheus: bool = False, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.enable_prometheus = enable_prometheus
        self.prometheus_port = prometheus_port

        # Counters are bumped from worker threads
        self._lock = threading.Lock()
        self._values: Dict[str, float] = {name: 0 for name in COUNTERS}

        self.prometheus_registry = CollectorRegistry()
        self.prometheus_metrics = {
            name: Counter(f'searchindex_{name}', description, registry=self.prometheus_registry)
            for name, description in COUNTERS.items()
        }

    def start_prometheus_server(self):
        """Start Prometheus metrics HTTP server."""
        if not self.enable_prometheus:
            return

        try:
            start_http_server(self.prometheus_port, registry=self.prometheus_registry)
            self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")
        except OSError as e:
            self.logger.error(f"Failed to start Prometheus server: {e}")

    def increment_counter(self, name: str, amount: float = 1):
        """Increment a counter metric."""
        if name not in self.prometheus_metrics:
            raise KeyError(f"Unknown metric: {name}")

        with self._lock:
            self._values[name] += amount
        self.prometheus_metrics[name].inc(amount)

    def get_current_values(self) -> Dict[str, float]:
        """Get current values of all metrics."""
        with self._lock:
            return dict(self._values)

    def export_text(self) -> bytes:
        """Render the registry in the Prometheus exposition format."""
        return generate_latest(self.prometheus_registry)


class IndexMonitor:
    """High-level monitoring interface for building, crawling and searching."""

    def __init__(self, metrics_collector: MetricsCollector):
        self.metrics = metrics_collector
        self.start_time = time.time()

    def record_file_indexed(self, path: str):
        self.metrics.increment_counter('files_indexed_total')

    def record_file_failed(self, path: str):
        self.metrics.increment_counter('files_failed_total')

    def record_page_crawled(self, url: str):
        self.metrics.increment_counter('pages_crawled_total')

    def record_page_failed(self, url: str):
        self.metrics.increment_counter('pages_failed_total')

    def record_task_failed(self):
        self.metrics.increment_counter('tasks_failed_total')

    def record_query(self, query: str):
        self.metrics.increment_counter('queries_processed_total')

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        current_values = self.metrics.get_current_values()
        runtime = time.time() - self.start_time

        return {
            'runtime_seconds': runtime,
            'metrics': current_values,
            'rates': {
                'files_per_second': current_values['files_indexed_total'] / runtime if runtime > 0 else 0,
                'pages_per_minute': current_values['pages_crawled_total'] / (runtime / 60) if runtime > 0 else 0,
            }
        }


# Global monitoring instance
_global_monitor: Optional[IndexMonitor] = None


def initialize_monitoring(enable_prometheus: bool = False, prometheus_port: int = 8000) -> IndexMonitor:
    """Initialize global monitoring."""
    global _global_monitor

    metrics_collector = MetricsCollector(enable_prometheus, prometheus_port)
    _global_monitor = IndexMonitor(metrics_collector)

    return _global_monitor


def get_monitor() -> Optional[IndexMonitor]:
    """Get the global monitor instance."""
    return _global_monitor


def reset_monitoring():
    """Remove the global monitor."""
    global _global_monitor
    _global_monitor = None
