"""
Crawl engine boundary: page records, their store and the runners producing them
"""

from .page_record import PageRecord
from .record_store import PageRecordStore
from .base import CrawlRunner, ProgressCallback
from .playwright_runner import PlaywrightCrawlRunner, thumbnail_name

__all__ = [
    'PageRecord',
    'PageRecordStore',
    'CrawlRunner',
    'ProgressCallback',
    'PlaywrightCrawlRunner',
    'thumbnail_name'
]
