"""WebSocket connection manager used to push moderation events to users."""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks active WebSocket connections keyed by user_id."""

    def __init__(self) -> None:
        # user_id -> set of active websocket connections
        self._connections: dict[int, set[WebSocket]] = {}
        # Loop that owns the sockets; sync routes run in worker threads without one
        self._loop: asyncio.AbstractEventLoop | None = None

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self._connections.setdefault(user_id, set()).add(websocket)
        logger.info("WS connected: user=%s (total=%s)", user_id, self.total_connections)

    def disconnect(self, websocket: WebSocket, user_id: int) -> None:
        conns = self._connections.get(user_id)
        if conns:
            conns.discard(websocket)
            if not conns:
                del self._connections[user_id]
        logger.info("WS disconnected: user=%s (total=%s)", user_id, self.total_connections)

    async def send_to_user(self, user_id: int, event: str, data: Any) -> None:
        """Send event to all connections for a user."""
        conns = self._connections.get(user_id, set())
        payload = json.dumps({"event": event, "data": data}, default=str)
        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_text(payload)
            except Exception:
                logger.warning("Dropping dead WS for user=%s", user_id, exc_info=True)
                dead.append(ws)
        for ws in dead:
            conns.discard(ws)

    def notify(self, user_id: int, event: str, data: Any) -> None:
        """Schedule a push from sync or async code. Users with no open socket are skipped."""
        if not self.is_connected(user_id):
            logger.debug("No connection; skipped %s for user=%s", event, user_id)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            loop.create_task(self.send_to_user(user_id, event, data))
        elif self._loop is not None and not self._loop.is_closed():
            asyncio.run_coroutine_threadsafe(self.send_to_user(user_id, event, data), self._loop)

    def is_connected(self, user_id: int) -> bool:
        return user_id in self._connections

    @property
    def total_connections(self) -> int:
        return sum(len(c) for c in self._connections.values())


# Singleton instance used across the app
ws_manager = ConnectionManager()
