from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from realtime import manager

router = APIRouter()


@router.websocket("/ws")
async def broadcast_ws(websocket: WebSocket):
    """Subscribe to platform-wide events (courseAccessUpdated). No auth, no replay."""
    await manager.connect(websocket)
    await websocket.send_json({"event": "connection_ack"})
    try:
        while True:
            # Client messages are ignored apart from ping/pong
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
