"""Rate-limited FIFO queue for deployment tasks."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

from redeploy.config import get_settings
from redeploy.deploy.models import QueueOutcome, RateLimitWindow

logger = logging.getLogger(__name__)

Task = Callable[[], Any]


class DeploymentQueue:
    """Run queued zero-argument tasks one at a time, at most ``rate_limit`` per window.

    The window is fixed: it opens at the first issue after the previous window
    has expired and the counter resets when it closes. Tasks may be plain
    callables or return awaitables. A failing task is recorded and the queue
    moves on.
    """

    def __init__(
        self,
        rate_limit: int = 30,
        rate_limit_window_ms: int = 60000,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if rate_limit < 1:
            raise ValueError("rate_limit must be >= 1")
        if rate_limit_window_ms < 1:
            raise ValueError("rate_limit_window_ms must be >= 1")
        self.rate_limit = rate_limit
        self.rate_limit_window_ms = rate_limit_window_ms
        self._clock = clock
        self._sleep = sleep
        self._tasks: deque[Task] = deque()
        self._request_count = 0
        self._window_start = clock()

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def window(self) -> RateLimitWindow:
        return RateLimitWindow(
            request_count=self._request_count,
            window_start=self._window_start,
            rate_limit=self.rate_limit,
            rate_limit_window_ms=self.rate_limit_window_ms,
        )

    def add(self, task: Task) -> None:
        self._tasks.append(task)

    def _elapsed_ms(self, now: float) -> float:
        return (now - self._window_start) * 1000.0

    async def _wait_for_slot(self) -> None:
        now = self._clock()
        if self._elapsed_ms(now) > self.rate_limit_window_ms:
            self._request_count = 0
            self._window_start = now
        if self._request_count < self.rate_limit:
            return
        wait_ms = max(0.0, self.rate_limit_window_ms - self._elapsed_ms(now))
        logger.info(
            "Deployment queue hit %d requests; waiting %.0f ms for the window to reset",
            self._request_count,
            wait_ms,
        )
        await self._sleep(wait_ms / 1000.0)
        self._request_count = 0
        self._window_start = self._clock()

    async def process(self) -> list[QueueOutcome]:
        """Drain the queue in FIFO order and return one outcome per task."""
        outcomes: list[QueueOutcome] = []
        while self._tasks:
            task = self._tasks.popleft()
            await self._wait_for_slot()
            try:
                result = task()
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                logger.warning("Queued deployment task failed: %s", exc)
                outcomes.append(QueueOutcome(status="error", error=str(exc)))
            else:
                outcomes.append(QueueOutcome(status="success", result=result))
            self._request_count += 1
        return outcomes


def queue_from_settings() -> DeploymentQueue | None:
    """A fresh queue when ``DEPLOY_USE_QUEUE=1``, otherwise ``None`` for chunked mode."""
    settings = get_settings()
    if int(settings.deploy_use_queue) != 1:
        return None
    return DeploymentQueue(
        rate_limit=settings.deploy_rate_limit,
        rate_limit_window_ms=settings.deploy_rate_limit_window_ms,
    )
