from __future__ import annotations

from dataclasses import dataclass

from elasticsearch import AsyncElasticsearch
from metricstream.core.config import Settings
from metricstream.infrastructure.elasticsearch.query import WindowedAggregateQuery

from .broadcaster import Broadcaster
from .profiles import SnapshotProfile, get_profile
from .snapshot_cache import SnapshotCache
from .subscriptions import SubscriptionManager


@dataclass
class SnapshotService:
    """Explicitly constructed pipeline shared by the pull and push surfaces."""

    profile: SnapshotProfile
    query: WindowedAggregateQuery
    cache: SnapshotCache
    broadcaster: Broadcaster
    subscriptions: SubscriptionManager

    @classmethod
    def from_settings(
        cls, client: AsyncElasticsearch, settings: Settings
    ) -> "SnapshotService":
        profile = get_profile(settings.snapshot_profile)
        query = WindowedAggregateQuery(
            client,
            index=settings.elasticsearch_index,
            window_seconds=settings.snapshot_window_seconds,
            request_factory=profile.request_factory,
            required_section=profile.required_section,
        )
        cache = SnapshotCache(
            query,
            profile.build_snapshot,
            tick_interval_seconds=settings.stream_tick_interval_seconds,
        )
        broadcaster = Broadcaster(
            cache, profile, emit_stale_signal=settings.stream_emit_stale_signal
        )
        subscriptions = SubscriptionManager(
            broadcaster, tick_interval_seconds=settings.stream_tick_interval_seconds
        )
        return cls(profile, query, cache, broadcaster, subscriptions)

    async def close(self) -> None:
        await self.subscriptions.shutdown()
        await self.cache.close()
