"""Moderation event stream.

Authors connect with ``/ws?token=<jwt>`` and receive ``post.status_changed``
events whenever one of their posts is approved, rejected or overridden.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from sqlalchemy import select

from warden.core.security import decode_access_token
from warden.core.ws_manager import ws_manager
from warden.db.session import SessionLocal
from warden.models.enums import PostStatus
from warden.models.post import Post
from warden.services.auth_service import get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter()

CLOSE_MISSING_TOKEN = 4001
CLOSE_BAD_TOKEN = 4003


def _resolve_subscriber(token: str) -> tuple[int, list[int]] | None:
    """Return the id of the active user behind token and their posts awaiting review."""
    claims = decode_access_token(token)
    if not claims or "sub" not in claims:
        return None
    with SessionLocal() as db:
        user = get_user_by_email(db, claims["sub"])
        if user is None or not user.is_active:
            return None
        awaiting = db.execute(
            select(Post.id).where(
                Post.author_id == user.id,
                Post.status == PostStatus.PENDING.value,
                Post.is_deleted.is_(False),
            )
        ).scalars().all()
        return user.id, list(awaiting)


@router.websocket("/ws")
async def moderation_events(websocket: WebSocket):
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=CLOSE_MISSING_TOKEN, reason="Missing token")
        return
    resolved = _resolve_subscriber(token)
    if resolved is None:
        await websocket.close(code=CLOSE_BAD_TOKEN, reason="Invalid or expired token")
        return
    user_id, awaiting = resolved

    await ws_manager.connect(websocket, user_id)
    await websocket.send_json({"event": "session.ready", "data": {"user_id": user_id, "pending_posts": awaiting}})
    try:
        # Clients only send keepalives; everything else is ignored
        while True:
            if await websocket.receive_text() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        logger.debug("WS client for user=%s went away", user_id)
    finally:
        ws_manager.disconnect(websocket, user_id)
