"""
Crawl task orchestration: task model, task table and the sequential worker
"""

from .task import CrawlTask, TaskStatus, CANCELLED_MESSAGE
from .task_store import TaskStore
from .orchestrator import TaskOrchestrator

__all__ = [
    'CrawlTask',
    'TaskStatus',
    'CANCELLED_MESSAGE',
    'TaskStore',
    'TaskOrchestrator'
]
