"""WebSocket real-time broadcasting utilities.

In-process only: every connected socket receives every event, there is no
per-client filtering and no replay for sockets that connect later. For
multi-process scale-out, replace the broadcast mechanism with Redis pub/sub.
"""
from __future__ import annotations
from typing import Set
from fastapi import WebSocket
import asyncio
from config import settings
from endpoints.logs import log_action, log_error

COURSE_ACCESS_UPDATED = "courseAccessUpdated"

class ConnectionManager:
    def __init__(self, send_timeout: float | None = None) -> None:
        self._conns: Set[WebSocket] = set()
        self.send_timeout = send_timeout or settings.BROADCAST_TIMEOUT_SECONDS
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._conns)

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)
        log_action("ws_connected", context={"connections": len(self._conns)})

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._conns.discard(websocket)
        log_action("ws_disconnected", context={"connections": len(self._conns)})

    async def broadcast(self, event: str, message: dict) -> int:
        """Fire-and-forget push to all current subscribers; returns how many sockets got it."""
        # Snapshot without holding lock during network sends
        async with self._lock:
            targets = list(self._conns)
        if not targets:
            return 0
        payload = {"event": event, **message}
        dead: list[WebSocket] = []
        for ws in targets:
            try:
                await asyncio.wait_for(ws.send_json(payload), self.send_timeout)
            except asyncio.TimeoutError:
                # Peer stopped reading; treat as dead
                log_action("ws_send_timeout", context={"event": event, "timeout": self.send_timeout}, level="WARNING")
                dead.append(ws)
            except Exception as e:
                log_error("ws_send_failed", e, context={"event": event})
                dead.append(ws)
        if dead:
            async with self._lock:
                for d in dead:
                    self._conns.discard(d)
        return len(targets) - len(dead)

    async def close_all(self):
        async with self._lock:
            targets = list(self._conns)
            self._conns.clear()
        for ws in targets:
            try:
                await ws.close()
            except Exception as e:
                log_error("ws_close_failed", e)

manager = ConnectionManager()

def get_broadcaster() -> ConnectionManager:
    return manager
