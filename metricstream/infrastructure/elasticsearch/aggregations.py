"""Search request bodies for the snapshot profiles.

Aggregation names are part of the response contract read by
`metricstream.services.snapshot_builder`.
"""

from __future__ import annotations

from typing import Any, Dict

TIMESTAMP_FIELD = "@timestamp"

CPU_USER = "CPU_gauge_user"
CPU_SYS = "CPU_gauge_sys"
CPU_CORES = "CPU_gauge_core"
MEMORY_USED_PCT = "Memory_gauge"
LOAD_5M = "Load_5m"
SWAP_USED_PCT = "Swap_usage"
FSSTAT_USED = "Fsstat_used"
FSSTAT_TOTAL = "Fsstat_total"
PROCESS_COUNT = "Process"
NET_IN_DROPPED = "In_pocketloss"
NET_OUT_DROPPED = "Out_pocketloss"
MEMORY_USED_BYTES = "Used_memory"
MEMORY_TOTAL_BYTES = "Total_memory"
TOP_DISK = "Top_disk"
TOP_DISK_USED_PCT = "used_pct"

_AVG_FIELDS = {
    CPU_USER: "system.cpu.user.pct",
    CPU_SYS: "system.cpu.system.pct",
    CPU_CORES: "system.cpu.cores",
    MEMORY_USED_PCT: "system.memory.actual.used.pct",
    LOAD_5M: "system.load.5",
    SWAP_USED_PCT: "system.memory.swap.used.pct",
    FSSTAT_USED: "system.fsstat.total_size.used",
    FSSTAT_TOTAL: "system.fsstat.total_size.total",
    MEMORY_USED_BYTES: "system.memory.actual.used.bytes",
    MEMORY_TOTAL_BYTES: "system.memory.total",
}
_MAX_FIELDS = {
    NET_IN_DROPPED: "system.network.in.dropped",
    NET_OUT_DROPPED: "system.network.out.dropped",
}


def window_filter(window_seconds: int) -> Dict[str, Any]:
    return {
        "bool": {
            "filter": [
                {"range": {TIMESTAMP_FIELD: {"gte": f"now-{int(window_seconds)}s"}}}
            ]
        }
    }


def metricbeat_aggregations() -> Dict[str, Any]:
    aggs: Dict[str, Any] = {
        name: {"avg": {"field": field}} for name, field in _AVG_FIELDS.items()
    }
    aggs.update({name: {"max": {"field": field}} for name, field in _MAX_FIELDS.items()})
    aggs[PROCESS_COUNT] = {"cardinality": {"field": "process.pid"}}
    aggs[TOP_DISK] = {
        "terms": {
            "field": "system.filesystem.mount_point.keyword",
            "size": 1,
            "order": {TOP_DISK_USED_PCT: "desc"},
        },
        "aggs": {
            TOP_DISK_USED_PCT: {"avg": {"field": "system.filesystem.used.pct"}},
        },
    }
    return aggs


def full_telemetry_request(window_seconds: int) -> Dict[str, Any]:
    """Keyword arguments for `AsyncElasticsearch.search` (full profile)."""
    return {
        "size": 0,
        "query": window_filter(window_seconds),
        "aggs": metricbeat_aggregations(),
    }


def host_identity_request(window_seconds: int) -> Dict[str, Any]:
    """Keyword arguments for `AsyncElasticsearch.search` (host profile)."""
    return {
        "size": 1,
        "query": window_filter(window_seconds),
        "sort": [{TIMESTAMP_FIELD: {"order": "desc"}}],
        "source": [TIMESTAMP_FIELD, "host.hostname"],
    }
