"""
Playwright Crawl Runner - Browser crawl capturing title and screenshot per page
"""

import asyncio
import logging
from collections import deque
from typing import List, Optional
from urllib.parse import urldefrag, urlparse
from playwright.async_api import async_playwright, Error as PlaywrightError, Page
from .base import CrawlRunner, ProgressCallback
from .page_record import PageRecord
from .record_store import PageRecordStore
from ..config import CrawlerConfig
from ..errors import CrawlError, StorageError
from ..storage import ObjectStore

logger = logging.getLogger(__name__)


def thumbnail_name(url: str, site_url: str) -> str:
    """Screenshot file name for a page

    The path relative to the site URL with '#' removed and '/' turned into
    '-'; the site root itself is named top.png.
    """
    relative = url[len(site_url):] if url.startswith(site_url) else url
    name = relative if relative else "top"
    name = name.replace('#', '', 1).replace('/', '-')
    if name.endswith('-'):
        name = name[:-1]
    return f"{name}.png"


class PlaywrightCrawlRunner(CrawlRunner):
    """Same-origin browser crawl with one Chromium page

    Pages are visited breadth-first up to ``max_pages``. Each page is
    screenshotted and uploaded to the object store before its record is
    pushed. A single browser is launched per run and closed afterwards.
    """

    def __init__(self, object_store: ObjectStore, config: CrawlerConfig = None):
        self.object_store = object_store
        self.config = config or CrawlerConfig()

    async def run(self, owner: str, target_url: str, store: PageRecordStore,
                  cancel_event: Optional[asyncio.Event] = None,
                  on_progress: Optional[ProgressCallback] = None) -> List[PageRecord]:
        try:
            await asyncio.wait_for(
                self._crawl(owner, target_url, store, cancel_event, on_progress),
                timeout=self.config.max_crawl_seconds
            )
        except asyncio.TimeoutError as e:
            raise CrawlError(
                f"Crawl of {target_url} exceeded {self.config.max_crawl_seconds:.0f}s"
            ) from e
        except PlaywrightError as e:
            raise CrawlError(f"Browser failure while crawling {target_url}: {e}") from e

        return list(store.read_all())

    async def _crawl(self, owner: str, target_url: str, store: PageRecordStore,
                     cancel_event: Optional[asyncio.Event],
                     on_progress: Optional[ProgressCallback]):
        max_pages = self.config.max_pages

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=self.config.headless,
                args=[
                    '--no-sandbox',
                    '--disable-dev-shm-usage',
                    '--disable-gpu'
                ]
            )
            try:
                context = await browser.new_context(
                    viewport={'width': self.config.viewport_width, 'height': self.config.viewport_height},
                    user_agent=self.config.user_agent
                )
                page = await context.new_page()

                url_queue = deque([target_url])
                queued_urls = {target_url}
                recorded_urls = set()
                pages_crawled = 0

                while url_queue and pages_crawled < max_pages:
                    if cancel_event is not None and cancel_event.is_set():
                        logger.info(f"Crawl of {target_url} aborted after {pages_crawled} pages")
                        break

                    url = url_queue.popleft()
                    logger.info(f"crawling {url}...")

                    try:
                        links = await self._process_page(page, owner, target_url, url, store, recorded_urls)
                    except StorageError:
                        raise
                    except (CrawlError, PlaywrightError) as e:
                        if url == target_url:
                            raise CrawlError(f"Failed to load {url}: {e}") from e
                        logger.warning(f"Skipping {url}: {e}")
                        continue

                    pages_crawled += 1
                    if on_progress is not None:
                        on_progress(pages_crawled, max_pages)

                    for link in links:
                        if link not in queued_urls:
                            queued_urls.add(link)
                            url_queue.append(link)

                logger.info(f"Crawled {pages_crawled} pages from {target_url}")
            finally:
                await browser.close()

    async def _process_page(self, page: Page, owner: str, site_url: str, url: str,
                            store: PageRecordStore, recorded_urls: set) -> List[str]:
        """Visit url, upload its screenshot, push its record and return same-origin links"""
        response = await page.goto(
            url,
            wait_until='load',
            timeout=self.config.navigation_timeout * 1000
        )
        if response is not None and response.status >= 400:
            raise CrawlError(f"HTTP {response.status}")

        title = await page.title()
        final_url = page.url
        links = await self._same_origin_links(page, site_url)

        # Redirects can land several queued URLs on the same page
        if final_url in recorded_urls:
            return links
        recorded_urls.add(final_url)

        image = await page.screenshot(full_page=self.config.full_page_screenshots, type='png')
        host_name = urlparse(final_url).hostname or 'unknown'
        key = f"private/{owner}/{host_name}-{thumbnail_name(final_url, site_url)}"
        thumbnail_ref = await self.object_store.upload(key, image)

        store.push(PageRecord(url=final_url, title=title, thumbnail_ref=thumbnail_ref))
        return links

    @staticmethod
    async def _same_origin_links(page: Page, site_url: str) -> List[str]:
        hrefs = await page.eval_on_selector_all(
            'a[href]', 'elements => elements.map(element => element.href)'
        )
        origin = urlparse(site_url)

        links = []
        for href in hrefs:
            link = urldefrag(href).url
            parsed = urlparse(link)
            if parsed.scheme != origin.scheme or parsed.netloc != origin.netloc:
                continue
            if parsed.path.lower().endswith('.pdf'):
                continue
            links.append(link)
        return links
