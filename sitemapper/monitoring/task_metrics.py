from dataclasses import dataclass


@dataclass
class TaskMetrics:
    """Crawl task counters"""
    tasks_submitted: int = 0
    tasks_started: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0
    tasks_cancelled: int = 0
    retries: int = 0
    tasks_swept: int = 0
    persist_failures: int = 0
    pages_crawled: int = 0
    queue_depth: int = 0
    avg_task_seconds: float = 0.0
