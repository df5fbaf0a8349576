"""Client payload derived from a snapshot.

Pure functions only: the same snapshot always yields the same payload.
Position order and string formatting are what existing dashboards expect.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Optional, Tuple

from metricstream.domain.models import UNAVAILABLE, HostSnapshot, MetricSnapshot

GIB = 2**30


class DerivedViewModel(NamedTuple):
    cpu_gauge_pct: Optional[str]
    memory_gauge_pct: Optional[str]
    load_gauge: Optional[str]
    swap_gauge_pct: Optional[str]
    disk_used_pct: Optional[str]
    process_count: Optional[int]
    net_in_dropped: Optional[float]
    net_out_dropped: Optional[float]
    used_memory_gib: Optional[str]
    total_memory_gib: Optional[float]
    top_disk_mount: Optional[Tuple[str, str]]

    def as_payload(self) -> list:
        payload = list(self)
        if self.top_disk_mount is not None:
            payload[-1] = list(self.top_disk_mount)
        return payload


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return UNAVAILABLE
    return value


def _fixed(value: Optional[float], digits: int) -> Optional[str]:
    value = _finite(value)
    return UNAVAILABLE if value is None else f"{value:.{digits}f}"


def _scaled(value: Optional[float], factor: float) -> Optional[float]:
    return UNAVAILABLE if value is None else _finite(value * factor)


def _ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    if numerator is None or denominator is None:
        return UNAVAILABLE
    try:
        return _finite(numerator / denominator)
    except (ZeroDivisionError, OverflowError):
        return UNAVAILABLE


def _cpu_pct(snapshot: MetricSnapshot) -> Optional[float]:
    if snapshot.cpu_user_pct is None or snapshot.cpu_sys_pct is None:
        return UNAVAILABLE
    busy = snapshot.cpu_user_pct + snapshot.cpu_sys_pct
    return _scaled(_ratio(busy, snapshot.cpu_core_count), 100)


def _top_disk(top_disk: Optional[Tuple[str, float]]) -> Optional[Tuple[str, str]]:
    used_pct = _fixed(None if top_disk is None else top_disk[1], 2)
    return UNAVAILABLE if used_pct is None else (top_disk[0], used_pct)


def derive_view(snapshot: MetricSnapshot) -> DerivedViewModel:
    return DerivedViewModel(
        cpu_gauge_pct=_fixed(_cpu_pct(snapshot), 3),
        memory_gauge_pct=_fixed(_scaled(snapshot.memory_used_pct, 100), 3),
        load_gauge=_fixed(snapshot.load_5m, 3),
        swap_gauge_pct=_fixed(_scaled(snapshot.swap_used_pct, 100), 3),
        disk_used_pct=_fixed(
            _scaled(
                _ratio(snapshot.fsstat_used_bytes, snapshot.fsstat_total_bytes), 100
            ),
            3,
        ),
        process_count=snapshot.process_count,
        net_in_dropped=_finite(snapshot.net_in_dropped),
        net_out_dropped=_finite(snapshot.net_out_dropped),
        used_memory_gib=_fixed(_ratio(snapshot.memory_used_bytes, GIB), 1),
        total_memory_gib=_ratio(snapshot.memory_total_bytes, GIB),
        top_disk_mount=_top_disk(snapshot.top_disk_mount),
    )


def metric_payload(snapshot: MetricSnapshot) -> List:
    return derive_view(snapshot).as_payload()


def host_payload(snapshot: HostSnapshot) -> List:
    return [snapshot.timestamp, snapshot.hostname]
