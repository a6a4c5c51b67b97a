"""
Shared fakes for the crawl engine and storage collaborators
"""

import asyncio
from typing import List, Optional
import pytest
from sitemapper.config import OrchestratorConfig
from sitemapper.crawler import CrawlRunner, PageRecord, PageRecordStore
from sitemapper.errors import CrawlError, PersistenceError
from sitemapper.storage import RecordSink


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeRunner(CrawlRunner):
    """Pushes canned records; can fail, block and report progress on demand"""

    def __init__(self, records: Optional[List[PageRecord]] = None, fail_times: int = 0,
                 error: Exception = None, gate: Optional[asyncio.Event] = None,
                 progress: Optional[tuple] = None):
        self.records = records if records is not None else [
            PageRecord(url='https://ex.com/', title='Home', thumbnail_ref='private/u1/ex.com-top.png'),
            PageRecord(url='https://ex.com/en', title='English', thumbnail_ref='private/u1/ex.com-en.png'),
        ]
        self.fail_times = fail_times
        self.error = error or CrawlError("boom")
        self.gate = gate
        self.progress = progress
        self.calls = 0
        self.urls: List[str] = []
        self.active = 0
        self.max_active = 0
        self.started = asyncio.Event()
        self.failed_once = asyncio.Event()
        self.cancel_events: List[asyncio.Event] = []

    async def run(self, owner, target_url, store: PageRecordStore, cancel_event=None, on_progress=None):
        self.calls += 1
        self.urls.append(target_url)
        self.cancel_events.append(cancel_event)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            # Let other coroutines observe the running crawl
            await asyncio.sleep(0.01)

            if self.progress is not None and on_progress is not None:
                on_progress(*self.progress)

            if self.gate is not None:
                await self.gate.wait()

            if self.calls <= self.fail_times:
                self.failed_once.set()
                raise self.error

            for record in self.records:
                store.push(record)
            return list(store.read_all())
        finally:
            self.active -= 1


class FakeRecordSink(RecordSink):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.persisted = []

    async def persist(self, owner, target_url, tree):
        if self.fail:
            raise PersistenceError("database unavailable")
        self.persisted.append((owner, target_url, tree.to_dict()))


@pytest.fixture
def fast_config():
    return OrchestratorConfig(max_attempts=3, retry_delay=0.01, retention_seconds=60.0, sweep_interval=0)


@pytest.fixture
def clock():
    return FakeClock()
