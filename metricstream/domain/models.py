from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Marker for a value that could not be computed this tick. Serialized as null.
UNAVAILABLE = None


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """Client-facing record with camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")


class MetricSnapshot(_Snapshot):
    """Rolling-window host telemetry computed from one aggregation query."""

    cpu_user_pct: Optional[float] = UNAVAILABLE
    cpu_sys_pct: Optional[float] = UNAVAILABLE
    cpu_core_count: Optional[float] = UNAVAILABLE
    memory_used_pct: Optional[float] = UNAVAILABLE
    load_5m: Optional[float] = Field(UNAVAILABLE, alias="load5m")
    swap_used_pct: Optional[float] = UNAVAILABLE
    fsstat_used_bytes: Optional[float] = UNAVAILABLE
    fsstat_total_bytes: Optional[float] = UNAVAILABLE
    process_count: Optional[int] = UNAVAILABLE
    net_in_dropped: Optional[float] = UNAVAILABLE
    net_out_dropped: Optional[float] = UNAVAILABLE
    memory_used_bytes: Optional[float] = UNAVAILABLE
    memory_total_bytes: Optional[float] = UNAVAILABLE
    # (mountPath, usedPct)
    top_disk_mount: Optional[Tuple[str, float]] = UNAVAILABLE


class HostSnapshot(_Snapshot):
    """Latest document identity within the window (host profile)."""

    timestamp: Optional[str] = UNAVAILABLE
    hostname: Optional[str] = UNAVAILABLE
