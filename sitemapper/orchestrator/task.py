"""
Crawl Task - Lifecycle record of one crawl-and-build job
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional


class TaskStatus(Enum):
    """Lifecycle states of a crawl task"""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.ERROR)


CANCELLED_MESSAGE = "cancelled by user"


@dataclass
class CrawlTask:
    """State of a crawl task as owned by the orchestrator"""
    id: str
    owner: str
    target_url: str
    status: TaskStatus = TaskStatus.QUEUED
    progress: Optional[int] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    attempts: int = 0
    created_at: float = 0.0
    updated_at: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the HTTP layer"""
        return {
            'id': self.id,
            'owner': self.owner,
            'targetUrl': self.target_url,
            'status': self.status.value,
            'progress': self.progress,
            'result': self.result,
            'error': self.error,
            'attempts': self.attempts,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at)
        }


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
