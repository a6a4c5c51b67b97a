import asyncio
import random
import time
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from collections import defaultdict
import aiohttp
from .errors import CrawlError, StorageError, PersistenceError

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of crawl job failures"""
    NETWORK_TIMEOUT = "network_timeout"
    CONNECTION_ERROR = "connection_error"
    CRAWL_ERROR = "crawl_error"
    STORAGE_ERROR = "storage_error"
    PERSISTENCE_ERROR = "persistence_error"
    UNKNOWN_ERROR = "unknown_error"


@dataclass
class RetryConfig:
    """Configuration for retry behavior

    Defaults give a fixed two second pause between at most three attempts.
    """
    max_attempts: int = 3
    base_delay: float = 2.0
    max_delay: float = 60.0
    exponential_base: float = 1.0
    jitter: bool = False
    retryable_errors: List[ErrorType] = None

    def __post_init__(self):
        if self.retryable_errors is None:
            # A failed crawl or build is always worth another attempt
            self.retryable_errors = [
                ErrorType.NETWORK_TIMEOUT,
                ErrorType.CONNECTION_ERROR,
                ErrorType.CRAWL_ERROR,
                ErrorType.STORAGE_ERROR,
                ErrorType.UNKNOWN_ERROR
            ]


@dataclass
class ErrorInfo:
    """Information about a failed attempt"""
    task_id: str
    url: str
    error_type: ErrorType
    message: str
    timestamp: float
    attempt: int


class ErrorHandler:
    """Classifies failures, decides on retries and keeps an error history"""

    def __init__(self, retry_config: RetryConfig = None, history_size: int = 1000):
        self.retry_config = retry_config or RetryConfig()
        self.history_size = history_size
        self.error_history: List[ErrorInfo] = []

    def classify_error(self, error: Exception) -> ErrorType:
        """Classify an error into appropriate error type"""
        if isinstance(error, asyncio.TimeoutError):
            return ErrorType.NETWORK_TIMEOUT
        elif isinstance(error, aiohttp.ClientConnectorError):
            return ErrorType.CONNECTION_ERROR
        elif isinstance(error, StorageError):
            return ErrorType.STORAGE_ERROR
        elif isinstance(error, CrawlError):
            return ErrorType.CRAWL_ERROR
        elif isinstance(error, PersistenceError):
            return ErrorType.PERSISTENCE_ERROR

        return ErrorType.UNKNOWN_ERROR

    def is_retryable(self, error_type: ErrorType, attempt: int) -> bool:
        """Determine if an error should be retried"""
        if attempt >= self.retry_config.max_attempts:
            return False

        return error_type in self.retry_config.retryable_errors

    def calculate_delay(self, attempt: int) -> float:
        """Delay before the attempt following ``attempt``"""
        delay = self.retry_config.base_delay * (
            self.retry_config.exponential_base ** (attempt - 1)
        )
        delay = min(delay, self.retry_config.max_delay)

        if self.retry_config.jitter:
            delay += delay * 0.1 * random.random()

        return delay

    def record_failure(self, task_id: str, url: str, error: Exception, attempt: int) -> ErrorInfo:
        """Classify, log and remember a failed attempt"""
        error_info = ErrorInfo(
            task_id=task_id,
            url=url,
            error_type=self.classify_error(error),
            message=describe_error(error),
            timestamp=time.time(),
            attempt=attempt
        )

        self.error_history.append(error_info)
        if len(self.error_history) > self.history_size:
            del self.error_history[:-self.history_size]

        log_level = logging.WARNING if attempt < self.retry_config.max_attempts else logging.ERROR
        logger.log(
            log_level,
            f"Attempt {attempt}/{self.retry_config.max_attempts} failed for task {task_id} ({url}): "
            f"{error_info.error_type.value} - {error_info.message}"
        )
        return error_info

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors encountered"""
        if not self.error_history:
            return {"total_errors": 0}

        error_counts = defaultdict(int)
        for error in self.error_history:
            error_counts[error.error_type.value] += 1

        recent_errors = [e for e in self.error_history if time.time() - e.timestamp < 300]

        return {
            "total_errors": len(self.error_history),
            "failed_tasks": len({e.task_id for e in self.error_history}),
            "error_types": dict(error_counts),
            "recent_errors": len(recent_errors)
        }


def describe_error(error: Exception) -> str:
    """Message stored on a failed task"""
    message = str(error)
    return message if message else error.__class__.__name__
