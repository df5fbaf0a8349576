from __future__ import annotations

import asyncio
import math
import time
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from metricstream.core.logger import get_logger
from metricstream.metrics import (
    ACTIVE_SUBSCRIPTIONS,
    DELIVERY_FAILURES_TOTAL,
    DELIVERY_SKIPPED_TICKS_TOTAL,
)

from .broadcaster import Broadcaster

logger = get_logger("metricstream.subscriptions")

SendFn = Callable[[Dict[str, Any]], Awaitable[None]]


class SubscriptionState(str, Enum):
    CONNECTED = "connected"
    DELIVERING = "delivering"
    DISCONNECTED = "disconnected"


class Subscription:
    """One connected push client and the single task delivering to it."""

    def __init__(self, send: SendFn):
        self.id = uuid.uuid4().hex
        self.send = send
        self.state = SubscriptionState.CONNECTED
        self.connected_at = time.time()
        self.deliveries = 0
        self.skipped_ticks = 0
        self.task: Optional["asyncio.Task[None]"] = None

    @property
    def is_active(self) -> bool:
        return self.state is not SubscriptionState.DISCONNECTED


class SubscriptionManager:
    """Owns subscriber lifecycles: CONNECTED -> DELIVERING -> DISCONNECTED.

    Every subscription gets its own delivery task. It delivers once right away
    and then at `started + k * interval`. Deliveries to one subscriber never
    overlap; firings missed while a delivery was still running are skipped,
    not queued.
    """

    def __init__(self, broadcaster: Broadcaster, tick_interval_seconds: float):
        self.broadcaster = broadcaster
        self.tick_interval = tick_interval_seconds
        self._subscriptions: Dict[str, Subscription] = {}

    @property
    def active_count(self) -> int:
        return len(self._subscriptions)

    def get(self, subscription_id: str) -> Optional[Subscription]:
        return self._subscriptions.get(subscription_id)

    def connect(self, send: SendFn) -> Subscription:
        sub = Subscription(send)
        self._subscriptions[sub.id] = sub
        sub.task = asyncio.create_task(self._run(sub), name=f"subscription-{sub.id}")
        ACTIVE_SUBSCRIPTIONS.set(len(self._subscriptions))
        logger.info(
            "subscriber_connected",
            extra={"subscription_id": sub.id, "active": len(self._subscriptions)},
        )
        return sub

    def disconnect(self, subscription_id: str) -> bool:
        """Stop future deliveries to a subscriber. Safe to call repeatedly."""
        sub = self._subscriptions.pop(subscription_id, None)
        if sub is None or not sub.is_active:
            return False
        sub.state = SubscriptionState.DISCONNECTED
        task = sub.task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        ACTIVE_SUBSCRIPTIONS.set(len(self._subscriptions))
        logger.info(
            "subscriber_disconnected",
            extra={
                "subscription_id": sub.id,
                "deliveries": sub.deliveries,
                "skipped_ticks": sub.skipped_ticks,
                "connected_seconds": round(time.time() - sub.connected_at, 3),
                "active": len(self._subscriptions),
            },
        )
        return True

    async def shutdown(self) -> None:
        subs = list(self._subscriptions.values())
        for sub in subs:
            self.disconnect(sub.id)
        tasks = [s.task for s in subs if s.task is not None]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, sub: Subscription) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        slot = 0
        if sub.state is SubscriptionState.CONNECTED:
            sub.state = SubscriptionState.DELIVERING
        while sub.is_active:
            await self._deliver_once(sub)
            if not sub.is_active:
                break
            next_slot = math.floor((loop.time() - started) / self.tick_interval) + 1
            missed = next_slot - slot - 1
            if missed > 0:
                sub.skipped_ticks += missed
                DELIVERY_SKIPPED_TICKS_TOTAL.inc(missed)
                logger.info(
                    "delivery_overran_ticks",
                    extra={"subscription_id": sub.id, "missed": missed},
                )
            slot = next_slot
            await asyncio.sleep(
                max(0.0, started + slot * self.tick_interval - loop.time())
            )

    async def _deliver_once(self, sub: Subscription) -> None:
        try:
            delivered = await self.broadcaster.deliver(sub)
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa
            DELIVERY_FAILURES_TOTAL.inc()
            logger.warning(
                "subscriber_send_failed",
                extra={"subscription_id": sub.id, "error": str(e)},
            )
            self.disconnect(sub.id)
            return
        if not sub.is_active:
            return
        if delivered:
            sub.deliveries += 1
        else:
            sub.skipped_ticks += 1
