"""
Usage Worker
============
Background queue that persists usage events off the request path.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gateway.config import settings
from gateway.core import metrics
from gateway.database import get_session_context
from gateway.schemas.usage import UsageEvent
from gateway.services.usage import UsageRecorder

logger = structlog.get_logger()

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class UsageWorker:
    """
    Consumes usage events from an in-process queue.

    Features:
    - ``submit`` never blocks and never raises
    - Retry with exponential backoff on database errors
    - Pending events drained on shutdown, bounded by a timeout
    """

    def __init__(
        self,
        session_factory: SessionFactory = get_session_context,
        max_queue_size: Optional[int] = None,
        retry_attempts: Optional[int] = None,
        retry_wait_seconds: float = 0.5,
        drain_timeout: Optional[float] = None,
    ):
        self._session_factory = session_factory
        if max_queue_size is None:
            max_queue_size = settings.usage_queue_size
        if retry_attempts is None:
            retry_attempts = settings.usage_retry_attempts
        if drain_timeout is None:
            drain_timeout = settings.usage_drain_timeout_seconds

        # maxsize 0 means unbounded
        self._queue: asyncio.Queue[UsageEvent] = asyncio.Queue(maxsize=max_queue_size)
        self.retry_attempts = retry_attempts
        self.retry_wait_seconds = retry_wait_seconds
        self.drain_timeout = drain_timeout
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, event: UsageEvent) -> bool:
        """Queue an event. Returns False if it had to be dropped."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            metrics.usage_events_dropped_total.labels(reason="queue_full").inc()
            logger.warning(
                "Usage queue full, dropping event",
                provider=event.provider,
                model=event.model,
            )
            return False
        return True

    async def process(self, event: UsageEvent) -> bool:
        """Persist one event. Failures are logged, never raised."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=self.retry_wait_seconds, max=10),
                retry=retry_if_exception_type(SQLAlchemyError),
                reraise=True,
            ):
                with attempt:
                    async with self._session_factory() as session:
                        await UsageRecorder(session).record(event)
        except Exception as e:
            metrics.usage_events_dropped_total.labels(reason="persist_failed").inc()
            logger.error(
                "Usage tracking error",
                provider=event.provider,
                model=event.model,
                workspace_id=event.workspace_id,
                error=str(e),
            )
            return False

        metrics.usage_cost_usd_total.labels(provider=event.provider, model=event.model).inc(
            float(event.cost_usd)
        )
        return True

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.process(event)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="usage-worker")
            logger.info("Usage worker started")

    async def drain(self) -> None:
        """Wait until every queued event has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Drain pending events, then cancel the consumer task."""
        if self._task is None:
            return

        try:
            await asyncio.wait_for(self.drain(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("Usage worker stopped with pending events", pending=self.pending)

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Usage worker stopped")
