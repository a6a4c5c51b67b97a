"""
Task Orchestrator - Runs crawl-and-build jobs one at a time

Callers submit, poll and cancel tasks without blocking. A single worker
coroutine drains the queue in FIFO order, because the crawl engine owns a
browser that cannot be shared between crawls. A second loop periodically
evicts tasks that have not changed within the retention window.
"""

import asyncio
import logging
import time
import uuid
from typing import Callable, Dict, Any, Iterable, Optional, Tuple
from urllib.parse import urlparse
from ..config import OrchestratorConfig
from ..crawler import CrawlRunner, PageRecord, PageRecordStore
from ..error_handler import ErrorHandler, RetryConfig
from ..errors import NotFound, ValidationError
from ..monitoring import MetricsCollector, log_task_event
from ..storage import RecordSink
from ..tree import SiteTree, build_site_tree
from .task import CrawlTask, TaskStatus, CANCELLED_MESSAGE
from .task_store import TaskStore

logger = logging.getLogger(__name__)

TreeBuilder = Callable[[str, Iterable[PageRecord]], SiteTree]


class TaskOrchestrator:
    """Owns the lifecycle of crawl tasks

    ``queued -> processing -> completed | error``. Every status change is a
    compare-and-set on the task store, so a cancel racing the worker's
    completion can never be overwritten.
    """

    def __init__(self, runner: CrawlRunner, record_sink: Optional[RecordSink] = None,
                 store: Optional[TaskStore] = None, config: OrchestratorConfig = None,
                 metrics: Optional[MetricsCollector] = None,
                 clock: Callable[[], float] = time.time,
                 tree_builder: TreeBuilder = build_site_tree):
        self.runner = runner
        self.record_sink = record_sink
        self.store = store if store is not None else TaskStore()
        self.config = config or OrchestratorConfig()
        self.metrics = metrics or MetricsCollector()
        self.clock = clock
        self.tree_builder = tree_builder
        self.error_handler = ErrorHandler(RetryConfig(
            max_attempts=self.config.max_attempts,
            base_delay=self.config.retry_delay
        ))

        self._queue: asyncio.Queue = asyncio.Queue()
        self._cancel_events: Dict[str, asyncio.Event] = {}
        self._worker_task: Optional[asyncio.Task] = None
        self._sweep_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Caller-facing operations
    # ------------------------------------------------------------------

    def submit(self, owner: str, target_url: str) -> str:
        """Queue a crawl of target_url on behalf of owner and return the task id"""
        owner = (owner or '').strip()
        target_url = (target_url or '').strip()

        if not owner:
            raise ValidationError("owner is required")
        if not target_url:
            raise ValidationError("target URL is required")

        parsed = urlparse(target_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValidationError(f"target URL must be an absolute http(s) URL: {target_url}")

        now = self.clock()
        task = CrawlTask(
            id=uuid.uuid4().hex,
            owner=owner,
            target_url=target_url,
            status=TaskStatus.QUEUED,
            created_at=now,
            updated_at=now
        )
        self.store.put(task)
        self._queue.put_nowait(task.id)

        self.metrics.record_submitted()
        self.metrics.update_queue_depth(self._queue.qsize())
        logger.info(f"Queued task {task.id}: {target_url} for {owner}")
        log_task_event('submitted', task.id, owner=owner, target_url=target_url)
        return task.id

    def status(self, task_id: str) -> CrawlTask:
        """Snapshot of a task"""
        task = self.store.get(task_id)
        if task is None:
            raise NotFound(task_id)
        return task

    def cancel(self, task_id: str) -> CrawlTask:
        """Cancel a queued or running task; terminal tasks are returned unchanged"""
        task = self.status(task_id)
        if task.status.is_terminal:
            return task

        cancelled = self.store.transition(
            task_id,
            (TaskStatus.QUEUED, TaskStatus.PROCESSING),
            status=TaskStatus.ERROR,
            error=CANCELLED_MESSAGE,
            updated_at=self.clock()
        )
        if cancelled is None:
            # The worker finished it (or the sweep evicted it) in between
            return self.status(task_id)

        event = self._cancel_events.get(task_id)
        if event is not None:
            event.set()

        self.metrics.record_cancelled()
        logger.info(f"Cancelled task {task_id} (was {task.status.value})")
        log_task_event('cancelled', task_id, previous_status=task.status.value)
        return cancelled

    def sweep(self) -> int:
        """Evict every task not updated within the retention window"""
        threshold = self.clock() - self.config.retention_seconds
        removed = self.store.remove_if(lambda task: task.updated_at < threshold)

        for task_id in removed:
            log_task_event('swept', task_id)
            event = self._cancel_events.get(task_id)
            if event is not None:
                event.set()

        if removed:
            self.metrics.record_swept(len(removed))
            logger.info(f"Swept {len(removed)} expired tasks")
        return len(removed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self):
        """Start the worker and the sweep loop"""
        if self._worker_task is None:
            self._worker_task = asyncio.create_task(self._worker_loop())
        if self._sweep_task is None and self.config.sweep_interval > 0:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("Task orchestrator started")

    async def stop(self):
        """Stop both loops, signalling any running crawl to abort"""
        for event in self._cancel_events.values():
            event.set()

        for background in (self._worker_task, self._sweep_task):
            if background is None:
                continue
            background.cancel()
            try:
                await background
            except asyncio.CancelledError:
                pass

        self._worker_task = None
        self._sweep_task = None
        logger.info("Task orchestrator stopped")

    async def join(self):
        """Wait until every queued task has been handled"""
        await self._queue.join()

    @property
    def queue_depth(self) -> int:
        return self._queue.qsize()

    def get_stats(self) -> Dict[str, Any]:
        """Metrics snapshot plus error summary"""
        return {
            'tasks_tracked': len(self.store),
            'metrics': self.metrics.get_current_snapshot(),
            'errors': self.error_handler.get_error_summary()
        }

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    async def _worker_loop(self):
        while True:
            task_id = await self._queue.get()
            self.metrics.update_queue_depth(self._queue.qsize())
            try:
                await self._process(task_id)
            except Exception as e:
                logger.exception(f"Unexpected failure while processing task {task_id}: {e}")
            finally:
                self._queue.task_done()

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.config.sweep_interval)
            self.sweep()

    async def _process(self, task_id: str):
        task = self.store.transition(
            task_id,
            (TaskStatus.QUEUED,),
            status=TaskStatus.PROCESSING,
            progress=0,
            updated_at=self.clock()
        )
        if task is None:
            logger.info(f"Skipping task {task_id}: no longer queued")
            return

        self.metrics.record_started()
        logger.info(f"Processing task {task_id}: {task.target_url}")

        cancel_event = asyncio.Event()
        self._cancel_events[task_id] = cancel_event
        try:
            await self._execute_with_retry(task, cancel_event)
        finally:
            self._cancel_events.pop(task_id, None)

    async def _execute_with_retry(self, task: CrawlTask, cancel_event: asyncio.Event):
        """Run the crawl and build, retrying failed attempts after a fixed delay

        The task stays ``processing`` across retries; only exhaustion of the
        attempts moves it to ``error``.
        """
        started = time.monotonic()
        max_attempts = self.error_handler.retry_config.max_attempts

        for attempt in range(1, max_attempts + 1):
            if cancel_event.is_set():
                return

            current = self.store.transition(
                task.id, (TaskStatus.PROCESSING,), attempts=attempt, updated_at=self.clock()
            )
            if current is None:
                return

            try:
                tree, pages = await self._run_once(task, cancel_event)
            except Exception as error:
                error_info = self.error_handler.record_failure(task.id, task.target_url, error, attempt)
                if cancel_event.is_set():
                    return

                if self.error_handler.is_retryable(error_info.error_type, attempt):
                    self.metrics.record_retry()
                    delay = self.error_handler.calculate_delay(attempt)
                    logger.info(f"Retrying task {task.id} in {delay:.1f}s (attempt {attempt + 1})")
                    if await self._wait_for_cancel(cancel_event, delay):
                        return
                    continue

                failed = self.store.transition(
                    task.id,
                    (TaskStatus.PROCESSING,),
                    status=TaskStatus.ERROR,
                    error=error_info.message,
                    updated_at=self.clock()
                )
                if failed is not None:
                    self.metrics.record_failed(time.monotonic() - started)
                    log_task_event('failed', task.id, attempts=attempt, error=error_info.message)
                return

            completed = self.store.transition(
                task.id,
                (TaskStatus.PROCESSING,),
                status=TaskStatus.COMPLETED,
                progress=100,
                result=tree.to_dict(),
                updated_at=self.clock()
            )
            if completed is None:
                logger.info(f"Discarding result of task {task.id}: cancelled or evicted while running")
                return

            self.metrics.record_completed(time.monotonic() - started, pages)
            logger.info(f"Task {task.id} completed: {pages} pages from {task.target_url}")
            log_task_event('completed', task.id, attempts=attempt, pages=pages)
            await self._persist(task, tree)
            return

    async def _run_once(self, task: CrawlTask, cancel_event: asyncio.Event) -> Tuple[SiteTree, int]:
        # A fresh record store per attempt; records of a failed attempt are discarded
        record_store = PageRecordStore(name=task.id)

        def on_progress(pages_crawled: int, max_pages: int):
            self._report_progress(task.id, pages_crawled, max_pages)

        await self.runner.run(
            task.owner,
            task.target_url,
            record_store,
            cancel_event=cancel_event,
            on_progress=on_progress
        )

        records = record_store.read_all()
        return self.tree_builder(task.target_url, records), len(records)

    def _report_progress(self, task_id: str, pages_crawled: int, max_pages: int):
        if max_pages <= 0:
            return
        progress = min(99, int(pages_crawled * 100 / max_pages))
        self.store.transition(
            task_id, (TaskStatus.PROCESSING,), progress=progress, updated_at=self.clock()
        )

    async def _persist(self, task: CrawlTask, tree: SiteTree):
        """Best-effort hand-off of the finished tree to the record sink"""
        if self.record_sink is None:
            return

        try:
            await self.record_sink.persist(task.owner, task.target_url, tree)
        except Exception as e:
            self.metrics.record_persist_failure()
            logger.error(f"Error persisting site tree of task {task.id}: {e}")

    @staticmethod
    async def _wait_for_cancel(cancel_event: asyncio.Event, delay: float) -> bool:
        """Sleep for delay; True if cancellation arrived first"""
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False
