"""
Report service: cache + FIFO queue + a single worker.

Request flow:
    request_report(url)
        -> cache hit?            return the stored report, queue untouched
        -> same url in flight?   await that request's future (coalescing)
        -> otherwise             enqueue, tick(), await own future

The worker is started by tick() only when the service is idle and the queue
holds work. It drains the queue one item at a time, so at most one audit
(one browser process) runs per service.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Protocol

from app.features.reports.services.report_cache import Report, ReportCache
from app.features.reports.services.report_queue import PendingReport, ReportQueue
from app.platform.config import settings
from app.platform.exceptions import ReportGenerationError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class AuditExecutor(Protocol):
    async def execute(self, url: str) -> Report:
        ...


class ReportService:
    def __init__(
        self,
        executor: AuditExecutor,
        cache: Optional[ReportCache] = None,
        queue: Optional[ReportQueue] = None,
        coalesce: Optional[bool] = None,
    ):
        self.executor = executor
        self.cache = cache if cache is not None else ReportCache()
        self.queue = queue if queue is not None else ReportQueue()
        self.coalesce = settings.REPORT_COALESCE_REQUESTS if coalesce is None else coalesce

        self._processing = False
        self._current: Optional[PendingReport] = None
        self._worker: Optional[asyncio.Task] = None
        self._closed = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def is_processing(self) -> bool:
        return self._processing

    def status(self) -> Dict[str, Any]:
        head = self.queue.peek()
        return {
            "processing": self._processing,
            "current_url": self._current.url if self._current else None,
            "queued": len(self.queue),
            "oldest_wait_seconds": round(head.waited, 1) if head else None,
            "cached": len(self.cache),
        }

    async def request_report(self, url: str, refresh: bool = False) -> Report:
        """
        Return the report for ``url``, generating it if needed.

        Raises ReportGenerationError if the audit for this request failed.
        """
        if not refresh:
            cached = self.cache.get(url)
            if cached is not None:
                logger.info(f"Cache hit for {url}")
                return cached

        future = None
        if self.coalesce and not refresh:
            future = self._in_flight_future(url)
            if future is not None:
                logger.info(f"Joining in-flight report request for {url}")

        if future is None:
            future = self.submit(url).future

        # A disconnecting caller must not cancel a future other callers share
        return await asyncio.shield(future)

    def submit(self, url: str) -> PendingReport:
        """Enqueue a request for ``url`` and wake the worker. Never suspends."""
        if self._closed:
            raise ReportGenerationError(url, "service shutting down")

        future = asyncio.get_running_loop().create_future()
        future.add_done_callback(_mark_retrieved)

        pending = PendingReport(url=url, future=future)
        self.queue.enqueue(pending)
        logger.info(f"Queued report request for {url} (queue depth {len(self.queue)})")

        self.tick()
        return pending

    def tick(self) -> None:
        if self._processing or not self.queue:
            return

        self._processing = True
        self._idle.clear()
        self._worker = asyncio.get_running_loop().create_task(self._drain())

    async def join(self) -> None:
        """Wait until the queue is empty and no audit is running."""
        while self._processing:
            await self._idle.wait()

    async def aclose(self) -> None:
        """
        Stop the worker and fail every request that has not been answered.

        Later submissions are rejected; cached reports are still served.
        """
        self._closed = True
        current = self._current
        worker = self._worker

        try:
            if worker is not None and not worker.done():
                worker.cancel()
                try:
                    await worker
                except asyncio.CancelledError:
                    # Only the worker's cancellation is expected here
                    if asyncio.current_task().cancelling():
                        raise
        finally:
            abandoned = [current] if current is not None else []
            while self.queue:
                abandoned.append(self.queue.dequeue())

            for pending in abandoned:
                self._resolve(pending, error=ReportGenerationError(pending.url, "service shutting down"))

            if abandoned:
                logger.warning(f"Report service closed with {len(abandoned)} unanswered request(s)")

    def _in_flight_future(self, url: str) -> Optional[asyncio.Future]:
        if self._current is not None and self._current.url == url and not self._current.future.done():
            return self._current.future

        pending = self.queue.find(url)
        return pending.future if pending is not None else None

    async def _drain(self) -> None:
        try:
            while True:
                pending = self.queue.dequeue()
                if pending is None:
                    break

                self._current = pending
                await self._process(pending)
                self._current = None
        finally:
            # No await between the empty dequeue and this point: a request
            # enqueued meanwhile would otherwise sit unserved
            self._current = None
            self._processing = False
            self._idle.set()

    async def _process(self, pending: PendingReport) -> None:
        url = pending.url
        started = time.monotonic()
        logger.info(f"Generating report for {url} after {pending.waited:.1f}s in queue ({len(self.queue)} waiting)")

        try:
            report = await self.executor.execute(url)
        except Exception as e:
            logger.error(f"Error generating the report for {url}: {e}")
            self._resolve(pending, error=ReportGenerationError(url, str(e)))
            return

        self.cache.put(url, report)
        logger.info(f"Report for {url} generated in {time.monotonic() - started:.1f}s")
        self._resolve(pending, report=report)

    @staticmethod
    def _resolve(
        pending: PendingReport,
        report: Optional[Report] = None,
        error: Optional[Exception] = None,
    ) -> None:
        if pending.future.done():
            return

        if error is not None:
            pending.future.set_exception(error)
        else:
            pending.future.set_result(report)


def _mark_retrieved(future: asyncio.Future) -> None:
    # Failures whose caller went away are already logged by the worker
    if not future.cancelled():
        future.exception()
