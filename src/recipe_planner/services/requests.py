"""Tracks in-flight inference requests so stale responses can be dropped."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RequestGate:
    """Keeps at most one in-flight request per key.

    Starting a request under a key that already has one running cancels the
    older request, and ``dismiss`` cancels whatever is running for a key.
    A cancelled request resolves to ``None`` for its caller instead of a
    result, so a view that was closed or re-submitted never receives a
    late answer.
    """

    _inflight: dict[str, asyncio.Task] = field(default_factory=dict)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T | None:
        """Run ``factory()`` as the current request for ``key``."""
        self.dismiss(key)
        task = asyncio.ensure_future(factory())
        self._inflight[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            _logger.info("Dropped stale request: key=%s", key)
            return None
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def dismiss(self, key: str) -> bool:
        """Cancel the in-flight request for ``key``; return True if one was running."""
        task = self._inflight.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def in_flight(self, key: str) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()
