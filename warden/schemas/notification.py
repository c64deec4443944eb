"""Notification schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    data: dict[str, Any] | None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationInbox(BaseModel):
    unread: int
    data: list[NotificationResponse]


class MarkAllReadResult(BaseModel):
    updated: int
