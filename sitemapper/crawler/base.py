"""
Crawl Runner Interface - One crawl of one site, as seen by the orchestrator
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from .page_record import PageRecord
from .record_store import PageRecordStore

# Called with (pages crawled so far, page limit)
ProgressCallback = Callable[[int, int], None]


class CrawlRunner(ABC):
    """Base interface for crawl engines"""

    @abstractmethod
    async def run(self, owner: str, target_url: str, store: PageRecordStore,
                  cancel_event: Optional[asyncio.Event] = None,
                  on_progress: Optional[ProgressCallback] = None) -> List[PageRecord]:
        """Crawl target_url, pushing one PageRecord per page into store

        Implementations should stop early once cancel_event is set.

        Returns:
            The records pushed during this run

        Raises:
            CrawlError: navigation or rendering failed, or the crawl timed out
            StorageError: a screenshot could not be uploaded
        """
        pass
