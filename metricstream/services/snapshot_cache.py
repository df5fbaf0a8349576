from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from metricstream.core.logger import get_logger
from metricstream.infrastructure.elasticsearch.query import WindowedAggregateQuery
from metricstream.metrics import SNAPSHOT_CACHE_HITS_TOTAL, SNAPSHOT_CACHE_MISSES_TOTAL

logger = get_logger("metricstream.snapshot_cache")


@dataclass
class _CacheEntry:
    tick: int
    task: "asyncio.Task[Any]"


class SnapshotCache:
    """Per-tick memo of the current snapshot.

    Ticks are fixed slices of the monotonic clock, so every caller inside one
    slice shares a single backend query no matter how many subscribers there
    are. At most one query is in flight at a time: a caller arriving in a new
    tick while the previous query is still running joins it, and the entry is
    re-labelled with the new tick. Waiters await through `asyncio.shield` so a
    cancelled waiter never cancels the shared computation.
    """

    def __init__(
        self,
        query: WindowedAggregateQuery,
        build_snapshot: Callable[[Mapping[str, Any]], Any],
        tick_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.query = query
        self.build_snapshot = build_snapshot
        self.tick_interval = tick_interval_seconds
        self._clock = clock
        self._entry: Optional[_CacheEntry] = None
        self.last_success_at: Optional[float] = None
        self.ready_event = asyncio.Event()

    def current_tick(self) -> int:
        return math.floor(self._clock() / self.tick_interval)

    async def get_current(self) -> Any:
        tick = self.current_tick()
        entry = self._entry
        if entry is None or (entry.tick != tick and entry.task.done()):
            SNAPSHOT_CACHE_MISSES_TOTAL.inc()
            entry = _CacheEntry(tick=tick, task=asyncio.create_task(self._compute()))
            entry.task.add_done_callback(_retrieve_result)
            self._entry = entry
        else:
            SNAPSHOT_CACHE_HITS_TOTAL.inc()
            if entry.tick != tick:
                logger.info(
                    "snapshot_query_overran_tick",
                    extra={"started_tick": entry.tick, "tick": tick},
                )
                entry.tick = tick
        return await asyncio.shield(entry.task)

    async def _compute(self) -> Any:
        raw = await self.query.execute()
        snapshot = self.build_snapshot(raw)
        self.last_success_at = time.time()
        self.ready_event.set()
        return snapshot

    async def close(self) -> None:
        entry, self._entry = self._entry, None
        if entry is not None and not entry.task.done():
            entry.task.cancel()
            try:
                await entry.task
            except asyncio.CancelledError:
                logger.debug("snapshot_task_cancelled")
            except Exception:  # noqa
                logger.debug("snapshot_task_failed_during_close", exc_info=True)


def _retrieve_result(task: "asyncio.Task[Any]") -> None:
    # Marks the exception as retrieved when every waiter was cancelled.
    if not task.cancelled():
        task.exception()
