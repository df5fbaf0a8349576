from fastapi import Request
from metricstream.services.snapshot_service import SnapshotService


def get_snapshot_service(request: Request) -> SnapshotService:
    return request.app.state.snapshot_service  # type: ignore[return-value]
