from typing import Dict, List
from fastapi import WebSocket
import asyncio
import json
from app.core.logging import logger


class ConnectionManager:
    """Websockets held by this process, keyed by user id."""

    def __init__(self):
        self.active: Dict[str, List[WebSocket]] = {}
        self.lock = asyncio.Lock()

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        async with self.lock:
            self.active.setdefault(str(user_id), []).append(websocket)

    async def disconnect(self, user_id: str, websocket: WebSocket):
        async with self.lock:
            conns = self.active.get(str(user_id), [])
            if websocket in conns:
                conns.remove(websocket)
            if not conns:
                self.active.pop(str(user_id), None)

    def is_connected(self, user_id) -> bool:
        return bool(self.active.get(str(user_id)))

    async def send_personal_message(self, user_id, message: dict):
        conns = list(self.active.get(str(user_id), []))
        data = json.dumps(message, default=str)
        for ws in conns:
            try:
                await ws.send_text(data)
            except Exception as e:
                logger.debug(f"Dropping broken websocket for user {user_id}: {e}")
                await self.disconnect(user_id, ws)

    async def close_all(self):
        async with self.lock:
            sockets = [ws for conns in self.active.values() for ws in conns]
            self.active.clear()
        for ws in sockets:
            try:
                await ws.close()
            except Exception as e:
                logger.debug(f"Error closing websocket: {e}")


manager = ConnectionManager()
