from fastapi import APIRouter, Request, Response

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request):
    try:
        alive = await request.app.state.elasticsearch.ping()
    except Exception as e:
        return Response(status_code=503, content=str(e))
    if not alive:
        return Response(status_code=503, content="elasticsearch unreachable")
    return {"status": "ok", "elasticsearch": alive}


@router.get("/readyz")
async def readyz(request: Request):
    service = request.app.state.snapshot_service
    if service.cache.ready_event.is_set():
        return {
            "status": "ready",
            "last_snapshot_at": service.cache.last_success_at,
            "subscribers": service.subscriptions.active_count,
        }
    return Response(status_code=503, content="not ready")
