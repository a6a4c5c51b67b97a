"""
Monitoring and observability modules
"""

from .metrics_collector import MetricsCollector
from .log_manager import LogManager, log_task_event
from .task_metrics import TaskMetrics
from .system_metrics import SystemMetrics

__all__ = [
    'MetricsCollector',
    'LogManager',
    'log_task_event',
    'TaskMetrics',
    'SystemMetrics'
]
