from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from metricstream.domain.errors import ConfigurationError
from metricstream.infrastructure.elasticsearch.aggregations import (
    full_telemetry_request,
    host_identity_request,
)

from .snapshot_builder import build_host_snapshot, build_metric_snapshot
from .view_model import host_payload, metric_payload


@dataclass(frozen=True)
class SnapshotProfile:
    """One query/transform configuration of the snapshot pipeline."""

    name: str
    event_name: str
    request_factory: Callable[[int], Dict[str, Any]]
    required_section: str
    build_snapshot: Callable[[Mapping[str, Any]], Any]
    to_payload: Callable[[Any], List]


FULL_TELEMETRY = SnapshotProfile(
    name="full",
    event_name="MetricbeatData",
    request_factory=full_telemetry_request,
    required_section="aggregations",
    build_snapshot=build_metric_snapshot,
    to_payload=metric_payload,
)

HOST_IDENTITY = SnapshotProfile(
    name="host",
    event_name="HostData",
    request_factory=host_identity_request,
    required_section="hits",
    build_snapshot=build_host_snapshot,
    to_payload=host_payload,
)

PROFILES = {p.name: p for p in (FULL_TELEMETRY, HOST_IDENTITY)}


def get_profile(name: str) -> SnapshotProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ConfigurationError(f"unknown snapshot profile '{name}'") from None
