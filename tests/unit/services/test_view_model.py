import pytest
from metricstream.domain.models import HostSnapshot, MetricSnapshot
from metricstream.services.snapshot_builder import build_metric_snapshot
from metricstream.services.view_model import (
    DerivedViewModel,
    derive_view,
    host_payload,
    metric_payload,
)


def _snapshot(**overrides) -> MetricSnapshot:
    values = dict(
        cpu_user_pct=0.2,
        cpu_sys_pct=0.1,
        cpu_core_count=4,
        memory_used_pct=0.5123,
        load_5m=1.25,
        swap_used_pct=0.01,
        fsstat_used_bytes=50,
        fsstat_total_bytes=200,
        process_count=312,
        net_in_dropped=7,
        net_out_dropped=0,
        memory_used_bytes=1073741824,
        memory_total_bytes=8589934592,
        top_disk_mount=("/data", 45.67),
    )
    values.update(overrides)
    return MetricSnapshot(**values)


def test_cpu_gauge():
    assert derive_view(_snapshot()).cpu_gauge_pct == "7.500"


def test_disk_used_pct():
    assert derive_view(_snapshot()).disk_used_pct == "25.000"


def test_used_memory_gib():
    view = derive_view(_snapshot())
    assert view.used_memory_gib == "1.0"
    assert view.total_memory_gib == 8.0


def test_top_disk_formatting():
    assert derive_view(_snapshot()).top_disk_mount == ("/data", "45.67")


def test_full_payload_order(metricbeat_response):
    payload = metric_payload(build_metric_snapshot(metricbeat_response))
    assert payload == [
        "7.500",
        "51.230",
        "1.250",
        "1.000",
        "25.000",
        312,
        7.0,
        0.0,
        "1.0",
        8.0,
        ["/data", "45.67"],
    ]


def test_zero_divisors_are_unavailable():
    view = derive_view(_snapshot(cpu_core_count=0, fsstat_total_bytes=0))
    assert view.cpu_gauge_pct is None
    assert view.disk_used_pct is None
    # unrelated fields still computed
    assert view.memory_gauge_pct == "51.230"


def test_unavailable_inputs_propagate_per_field():
    view = derive_view(
        _snapshot(cpu_sys_pct=None, load_5m=None, top_disk_mount=None)
    )
    assert view.cpu_gauge_pct is None
    assert view.load_gauge is None
    assert view.top_disk_mount is None
    assert view.as_payload()[-1] is None
    assert view.swap_gauge_pct == "1.000"


def test_empty_snapshot_yields_all_unavailable():
    view = derive_view(MetricSnapshot())
    assert all(value is None for value in view)
    assert len(view.as_payload()) == len(DerivedViewModel._fields) == 11


def test_view_is_replayable():
    snap = _snapshot()
    assert derive_view(snap) == derive_view(snap)
    assert metric_payload(snap) == metric_payload(snap)


def test_host_payload():
    snap = HostSnapshot(timestamp="2024-03-01T10:00:00.000Z", hostname="web-01")
    assert host_payload(snap) == ["2024-03-01T10:00:00.000Z", "web-01"]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"cpu_core_count": 1e-320}, "cpu_gauge_pct"),
        ({"memory_used_pct": 1e307}, "memory_gauge_pct"),
        ({"swap_used_pct": 1e307}, "swap_gauge_pct"),
        ({"fsstat_used_bytes": 1e308, "fsstat_total_bytes": 1e-10}, "disk_used_pct"),
        ({"memory_used_bytes": float("inf")}, "used_memory_gib"),
        ({"memory_total_bytes": float("nan")}, "total_memory_gib"),
        ({"load_5m": float("inf")}, "load_gauge"),
        ({"net_in_dropped": float("nan")}, "net_in_dropped"),
        ({"top_disk_mount": ("/data", float("inf"))}, "top_disk_mount"),
    ],
)
def test_non_finite_results_are_unavailable(overrides, field):
    view = derive_view(_snapshot(**overrides))
    assert getattr(view, field) is None
    assert "inf" not in str(view.as_payload())
    assert "nan" not in str(view.as_payload())
