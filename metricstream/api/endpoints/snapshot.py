from fastapi import APIRouter, Depends, HTTPException
from metricstream.api.dependencies import get_snapshot_service
from metricstream.domain.errors import BackendQueryFailed
from metricstream.services.snapshot_service import SnapshotService

router = APIRouter(prefix="/metricbeat")


@router.get("")
async def current_snapshot(svc: SnapshotService = Depends(get_snapshot_service)):
    try:
        snapshot = await svc.cache.get_current()
    except BackendQueryFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    return snapshot.to_record()


@router.get("/view")
async def current_view(svc: SnapshotService = Depends(get_snapshot_service)):
    try:
        payload = await svc.broadcaster.render()
    except BackendQueryFailed as e:
        raise HTTPException(status_code=503, detail=str(e))
    return svc.broadcaster.message(payload)
