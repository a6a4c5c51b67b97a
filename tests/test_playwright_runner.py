"""
Tests for the browser crawl helpers that do not need a real browser
"""

import asyncio
import pytest
from sitemapper.config import CrawlerConfig
from sitemapper.crawler import PageRecord, PageRecordStore, PlaywrightCrawlRunner, thumbnail_name
from sitemapper.errors import CrawlError
from sitemapper.storage import ObjectStore

SITE = 'https://ex.com/'


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakePage:
    """Stands in for a Playwright page already pointed at a document"""

    def __init__(self, final_url: str, title: str = 'Page', hrefs=None, status: int = 200):
        self.url = None
        self._final_url = final_url
        self._title = title
        self._hrefs = hrefs or []
        self._status = status

    async def goto(self, url, wait_until=None, timeout=None):
        self.url = self._final_url
        return FakeResponse(self._status)

    async def title(self):
        return self._title

    async def eval_on_selector_all(self, selector, expression):
        return list(self._hrefs)

    async def screenshot(self, full_page=False, type='png'):
        return b'png'


class MemoryObjectStore(ObjectStore):
    def __init__(self):
        self.objects = {}

    async def upload(self, key, data):
        self.objects[key] = data
        return key


@pytest.mark.parametrize('url, expected', [
    ('https://ex.com/', 'top.png'),
    ('https://ex.com/en', 'en.png'),
    ('https://ex.com/en/', 'en.png'),
    ('https://ex.com/en/about', 'en-about.png'),
    ('https://ex.com/en#', 'en.png'),
])
def test_thumbnail_name(url, expected):
    assert thumbnail_name(url, SITE) == expected


def test_same_origin_links_filtering():
    page = FakePage(SITE, hrefs=[
        'https://ex.com/en',
        'https://ex.com/en#team',
        'https://other.org/',
        'http://ex.com/insecure',
        'https://ex.com/files/report.PDF',
    ])

    links = asyncio.run(PlaywrightCrawlRunner._same_origin_links(page, SITE))

    assert links == ['https://ex.com/en', 'https://ex.com/en']


def test_process_page_uploads_and_records():
    object_store = MemoryObjectStore()
    runner = PlaywrightCrawlRunner(object_store, CrawlerConfig())
    store = PageRecordStore()
    page = FakePage('https://ex.com/en', title='English', hrefs=['https://ex.com/en/about'])

    links = asyncio.run(runner._process_page(page, 'u1', SITE, 'https://ex.com/en', store, set()))

    assert links == ['https://ex.com/en/about']
    assert list(object_store.objects) == ['private/u1/ex.com-en.png']
    assert store.read_all() == (
        PageRecord(url='https://ex.com/en', title='English', thumbnail_ref='private/u1/ex.com-en.png'),
    )


def test_process_page_skips_already_recorded_redirect_target():
    object_store = MemoryObjectStore()
    runner = PlaywrightCrawlRunner(object_store)
    store = PageRecordStore()
    page = FakePage('https://ex.com/en', hrefs=['https://ex.com/x'])

    links = asyncio.run(runner._process_page(page, 'u1', SITE, 'https://ex.com/old-en', store, {'https://ex.com/en'}))

    assert links == ['https://ex.com/x']
    assert len(store) == 0
    assert object_store.objects == {}


def test_process_page_rejects_error_status():
    runner = PlaywrightCrawlRunner(MemoryObjectStore())
    page = FakePage('https://ex.com/missing', status=404)

    with pytest.raises(CrawlError):
        asyncio.run(runner._process_page(page, 'u1', SITE, 'https://ex.com/missing', PageRecordStore(), set()))


def test_record_store_keeps_insertion_order():
    store = PageRecordStore(name='t1')
    store.push(PageRecord(url='https://ex.com/b'))
    store.push(PageRecord(url='https://ex.com/a'))

    assert [record.url for record in store.read_all()] == ['https://ex.com/b', 'https://ex.com/a']
