from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from metricstream.core.logger import get_logger
from metricstream.domain.errors import BackendQueryFailed
from metricstream.metrics import DELIVERIES_TOTAL, DELIVERY_SKIPPED_TICKS_TOTAL

from .profiles import SnapshotProfile
from .snapshot_cache import SnapshotCache

if TYPE_CHECKING:  # pragma: no cover
    from .subscriptions import Subscription

logger = get_logger("metricstream.broadcaster")

STALE_EVENT = "MetricbeatStale"


class Broadcaster:
    """Per-tick adapter: current snapshot -> client payload -> one subscriber.

    Holds no state of its own; the cache decides whether a query runs.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        profile: SnapshotProfile,
        emit_stale_signal: bool = False,
    ):
        self.cache = cache
        self.profile = profile
        self.emit_stale_signal = emit_stale_signal

    async def render(self) -> List[Any]:
        snapshot = await self.cache.get_current()
        return self.profile.to_payload(snapshot)

    def message(self, payload: List[Any]) -> Dict[str, Any]:
        return {"event": self.profile.event_name, "data": payload}

    async def deliver(self, subscription: "Subscription") -> bool:
        """Send the current payload to `subscription`.

        Returns False when the tick was skipped. Errors raised by the
        subscriber's `send` propagate to the caller.
        """
        try:
            payload = await self.render()
        except BackendQueryFailed as e:
            DELIVERY_SKIPPED_TICKS_TOTAL.inc()
            logger.warning(
                "delivery_skipped_backend_unavailable",
                extra={"subscription_id": subscription.id, "error": str(e)},
            )
            if self.emit_stale_signal and subscription.is_active:
                await subscription.send(
                    {
                        "event": STALE_EVENT,
                        "data": {"last_success_at": self.cache.last_success_at},
                    }
                )
            return False

        # Disconnected while the snapshot was being computed
        if not subscription.is_active:
            return False
        await subscription.send(self.message(payload))
        DELIVERIES_TOTAL.inc()
        return True
