"""Raw search response -> typed snapshot.

Builders are total: a missing or unusable aggregation becomes the
unavailable marker for that field only.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from metricstream.core.logger import get_logger
from metricstream.domain.errors import AggregationFieldMissing
from metricstream.domain.models import UNAVAILABLE, HostSnapshot, MetricSnapshot
from metricstream.infrastructure.elasticsearch import aggregations as aggs

logger = get_logger("metricstream.builder")


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return UNAVAILABLE
    value = float(value)
    if not math.isfinite(value):
        return UNAVAILABLE
    return value


def _aggregation(aggregations: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    agg = aggregations.get(name)
    if not isinstance(agg, Mapping):
        raise AggregationFieldMissing(name)
    return agg


def _scalar(aggregations: Mapping[str, Any], name: str) -> Optional[float]:
    try:
        return _finite(_aggregation(aggregations, name).get("value"))
    except AggregationFieldMissing as e:
        logger.debug("aggregation_field_missing", extra={"aggregation": e.name})
        return UNAVAILABLE


def _count(aggregations: Mapping[str, Any], name: str) -> Optional[int]:
    value = _scalar(aggregations, name)
    return UNAVAILABLE if value is None else int(value)


def _top_disk(aggregations: Mapping[str, Any]):
    try:
        buckets = _aggregation(aggregations, aggs.TOP_DISK).get("buckets")
    except AggregationFieldMissing as e:
        logger.debug("aggregation_field_missing", extra={"aggregation": e.name})
        return UNAVAILABLE
    if not isinstance(buckets, list) or not buckets:
        return UNAVAILABLE
    bucket = buckets[0]  # ordered by used_pct desc
    if not isinstance(bucket, Mapping) or not isinstance(bucket.get("key"), str):
        return UNAVAILABLE
    used = bucket.get(aggs.TOP_DISK_USED_PCT)
    ratio = _finite(used.get("value")) if isinstance(used, Mapping) else UNAVAILABLE
    if ratio is None:
        return UNAVAILABLE
    return (bucket["key"], round(ratio * 100, 2))


def build_metric_snapshot(raw: Mapping[str, Any]) -> MetricSnapshot:
    aggregations = raw.get("aggregations") if isinstance(raw, Mapping) else None
    if not isinstance(aggregations, Mapping):
        aggregations = {}
    return MetricSnapshot(
        cpu_user_pct=_scalar(aggregations, aggs.CPU_USER),
        cpu_sys_pct=_scalar(aggregations, aggs.CPU_SYS),
        cpu_core_count=_scalar(aggregations, aggs.CPU_CORES),
        memory_used_pct=_scalar(aggregations, aggs.MEMORY_USED_PCT),
        load_5m=_scalar(aggregations, aggs.LOAD_5M),
        swap_used_pct=_scalar(aggregations, aggs.SWAP_USED_PCT),
        fsstat_used_bytes=_scalar(aggregations, aggs.FSSTAT_USED),
        fsstat_total_bytes=_scalar(aggregations, aggs.FSSTAT_TOTAL),
        process_count=_count(aggregations, aggs.PROCESS_COUNT),
        net_in_dropped=_scalar(aggregations, aggs.NET_IN_DROPPED),
        net_out_dropped=_scalar(aggregations, aggs.NET_OUT_DROPPED),
        memory_used_bytes=_scalar(aggregations, aggs.MEMORY_USED_BYTES),
        memory_total_bytes=_scalar(aggregations, aggs.MEMORY_TOTAL_BYTES),
        top_disk_mount=_top_disk(aggregations),
    )


def build_host_snapshot(raw: Mapping[str, Any]) -> HostSnapshot:
    hits = raw.get("hits") if isinstance(raw, Mapping) else None
    docs = hits.get("hits") if isinstance(hits, Mapping) else None
    if not isinstance(docs, list) or not docs or not isinstance(docs[0], Mapping):
        return HostSnapshot()
    source = docs[0].get("_source")
    if not isinstance(source, Mapping):
        return HostSnapshot()
    host = source.get("host")
    hostname = host.get("hostname") if isinstance(host, Mapping) else None
    timestamp = source.get(aggs.TIMESTAMP_FIELD)
    return HostSnapshot(
        timestamp=timestamp if isinstance(timestamp, str) else UNAVAILABLE,
        hostname=hostname if isinstance(hostname, str) else UNAVAILABLE,
    )
