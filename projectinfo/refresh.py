"""Single-slot queue that serialises detect-and-write cycles."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional

from .logging import get_logger

logger = get_logger("refresh")


class RefreshQueue:
    """Runs ``action`` at most once at a time.

    A request that arrives while a run is in flight schedules exactly one
    follow-up run; any further requests before that follow-up starts are
    folded into it. Every caller resumes once a run that started after its
    request has finished.
    """

    def __init__(self, action: Callable[[], Awaitable[None]], *, name: str = "refresh") -> None:
        self._action = action
        self._name = name
        self._pending = False
        self._closed = False
        self._task: Optional[asyncio.Task[None]] = None
        self.runs = 0

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    async def request(self) -> bool:
        """Schedule a run and wait for it. Returns False once the queue is closed."""
        if self._closed:
            return False
        self._pending = True
        task = self._task if self.busy else None
        if task is None:
            task = self._task = asyncio.create_task(
                self._drain(), name=f"{self._name}-drain"
            )
        await asyncio.shield(task)
        return True

    def close(self) -> None:
        """Refuse new requests. A run already in flight is left to finish."""
        self._closed = True

    async def _drain(self) -> None:
        while self._pending and not self._closed:
            self._pending = False
            self.runs += 1
            try:
                await self._action()
            except Exception:
                logger.exception("Refresh run %s failed", self._name)
