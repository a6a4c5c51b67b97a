"""
Task Store - Lock-guarded table of crawl tasks keyed by task id
"""

import copy
import logging
import threading
from dataclasses import replace
from typing import Callable, Collection, Dict, List, Optional
from .task import CrawlTask, TaskStatus

logger = logging.getLogger(__name__)


class TaskStore:
    """In-memory task table

    Every read hands out a copy so callers can never mutate stored state.
    Status changes go through ``transition``, which only applies when the
    task is still in one of the expected states.
    """

    def __init__(self):
        self._tasks: Dict[str, CrawlTask] = {}
        self._lock = threading.RLock()

    def get(self, task_id: str) -> Optional[CrawlTask]:
        with self._lock:
            task = self._tasks.get(task_id)
            return _snapshot(task) if task else None

    def put(self, task: CrawlTask):
        with self._lock:
            self._tasks[task.id] = _snapshot(task)

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def for_each(self, func: Callable[[CrawlTask], None]):
        """Call func with a snapshot of every task"""
        with self._lock:
            tasks = [_snapshot(task) for task in self._tasks.values()]
        for task in tasks:
            func(task)

    def transition(self, task_id: str, expected: Collection[TaskStatus], **changes) -> Optional[CrawlTask]:
        """Atomically apply changes if the task's status is one of expected

        Returns:
            The updated task snapshot, or None when the task is gone or in
            another state.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None or task.status not in expected:
                return None
            updated = replace(task, **changes)
            self._tasks[task_id] = updated
            return _snapshot(updated)

    def remove_if(self, predicate: Callable[[CrawlTask], bool]) -> List[str]:
        """Delete every task matching predicate, returning the removed ids"""
        with self._lock:
            doomed = [task_id for task_id, task in self._tasks.items() if predicate(task)]
            for task_id in doomed:
                del self._tasks[task_id]
        return doomed

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._tasks


def _snapshot(task: CrawlTask) -> CrawlTask:
    return copy.deepcopy(task)
