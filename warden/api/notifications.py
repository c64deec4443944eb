"""Notification inbox API. Users only ever see their own notifications."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from warden.core.deps import get_current_user
from warden.db.session import get_db
from warden.models.user import User
from warden.schemas.common import MessageResponse
from warden.schemas.notification import MarkAllReadResult, NotificationInbox, NotificationResponse
from warden.services.notification_service import (
    count_unread,
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationInbox)
def inbox(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Newest first, read and unread."""
    return NotificationInbox(
        unread=count_unread(db, current_user.id),
        data=list_notifications(db, current_user.id, limit=limit),
    )


@router.get("/unread", response_model=list[NotificationResponse])
def unread(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_notifications(db, current_user.id, limit=200, unread_only=True)


@router.patch("/mark-all-read", response_model=MarkAllReadResult)
def read_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return MarkAllReadResult(updated=mark_all_read(db, current_user.id))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def read_one(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return mark_read(db, notification_id, current_user.id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    delete_notification(db, notification_id, current_user.id)
    return MessageResponse(message="Notification deleted successfully")
