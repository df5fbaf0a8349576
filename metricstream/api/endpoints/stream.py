from fastapi import APIRouter, WebSocket
from metricstream.core.logger import get_logger

router = APIRouter()
logger = get_logger("metricstream.stream")


@router.websocket("/ws")
async def stream(websocket: WebSocket):
    """Push channel.

    The first payload is sent right after accept, then one per tick until the
    client goes away. Inbound frames, text or binary, are ignored.
    """
    subscriptions = websocket.app.state.snapshot_service.subscriptions
    await websocket.accept()
    sub = subscriptions.connect(websocket.send_json)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(
                    "websocket_closed_by_client",
                    extra={"subscription_id": sub.id, "code": message.get("code")},
                )
                break
    finally:
        subscriptions.disconnect(sub.id)
