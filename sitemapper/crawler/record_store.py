"""
Page Record Store - Append-only dataset filled during one crawl attempt
"""

import logging
import threading
from typing import List, Tuple
from .page_record import PageRecord

logger = logging.getLogger(__name__)


class PageRecordStore:
    """Append-only store of page records for a single crawl

    The runner pushes records as pages are captured; the orchestrator reads
    them once when the crawl is over and hands them to the tree builder.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._records: List[PageRecord] = []
        self._lock = threading.Lock()

    def push(self, record: PageRecord):
        """Append a record"""
        with self._lock:
            self._records.append(record)
        logger.debug(f"[{self.name}] stored record {len(self)}: {record.url}")

    def read_all(self) -> Tuple[PageRecord, ...]:
        """Return every stored record in insertion order"""
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
