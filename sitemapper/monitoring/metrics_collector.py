import time
import psutil
import logging
import threading
from datetime import datetime
from dataclasses import asdict
from typing import Dict, Any
from collections import deque
from .task_metrics import TaskMetrics
from .system_metrics import SystemMetrics


class MetricsCollector:
    """Collects orchestrator and system metrics"""

    def __init__(self):
        self.start_time = time.time()

        self.task_metrics = TaskMetrics()
        self.system_metrics = SystemMetrics()

        # Durations of the last 100 finished tasks
        self.task_durations: deque = deque(maxlen=100)

        self._lock = threading.Lock()

    def record_submitted(self):
        with self._lock:
            self.task_metrics.tasks_submitted += 1

    def record_started(self):
        with self._lock:
            self.task_metrics.tasks_started += 1

    def record_completed(self, duration: float, pages: int = 0):
        """Record a task that produced a site tree"""
        with self._lock:
            self.task_metrics.tasks_completed += 1
            self.task_metrics.pages_crawled += pages
            self.task_durations.append(duration)
            self._update_calculated_metrics()

    def record_failed(self, duration: float):
        """Record a task that exhausted its attempts"""
        with self._lock:
            self.task_metrics.tasks_failed += 1
            self.task_durations.append(duration)
            self._update_calculated_metrics()

    def record_cancelled(self):
        with self._lock:
            self.task_metrics.tasks_cancelled += 1

    def record_retry(self):
        with self._lock:
            self.task_metrics.retries += 1

    def record_swept(self, count: int):
        with self._lock:
            self.task_metrics.tasks_swept += count

    def record_persist_failure(self):
        with self._lock:
            self.task_metrics.persist_failures += 1

    def update_queue_depth(self, depth: int):
        """Update current task queue depth"""
        with self._lock:
            self.task_metrics.queue_depth = depth

    def collect_system_metrics(self):
        """Collect current system resource metrics"""
        try:
            self.system_metrics.cpu_percent = psutil.cpu_percent(interval=None)
            self.system_metrics.memory_percent = psutil.virtual_memory().percent
            self.system_metrics.disk_free_gb = psutil.disk_usage('.').free / (1024**3)

            # Chromium runs as children of the service process
            try:
                process = psutil.Process()
                self.system_metrics.process_rss_mb = process.memory_info().rss / (1024 * 1024)
                self.system_metrics.browser_processes = len(process.children(recursive=True))
                self.system_metrics.open_files = process.num_fds() if hasattr(process, 'num_fds') else len(process.open_files())
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                self.system_metrics.browser_processes = 0
                self.system_metrics.open_files = 0

        except Exception as e:
            logging.warning(f"Failed to collect system metrics: {e}")

    def _update_calculated_metrics(self):
        if self.task_durations:
            self.task_metrics.avg_task_seconds = sum(self.task_durations) / len(self.task_durations)

    def get_current_snapshot(self) -> Dict[str, Any]:
        """Get current metrics snapshot"""
        with self._lock:
            self.collect_system_metrics()

            return {
                'timestamp': datetime.now().isoformat(),
                'uptime_seconds': time.time() - self.start_time,
                'task_metrics': asdict(self.task_metrics),
                'system_metrics': asdict(self.system_metrics)
            }
