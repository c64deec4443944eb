"""Notification inbox. Rows are written inside the transaction that changes the post."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from warden.core.errors import NotFoundError
from warden.db.session import atomic
from warden.models.enums import NotificationType, PostStatus
from warden.models.notification import Notification
from warden.models.post import Post

logger = logging.getLogger(__name__)

# new status -> (type, title, message template)
_STATUS_NOTICES: dict[PostStatus, tuple[NotificationType, str, str]] = {
    PostStatus.APPROVED: (
        NotificationType.POST_APPROVED,
        "Post approved",
        'Your post "{title}" has been approved and is now visible to everyone.',
    ),
    PostStatus.REJECTED: (
        NotificationType.POST_REJECTED,
        "Post rejected",
        'Your post "{title}" has been rejected.',
    ),
    PostStatus.PENDING: (
        NotificationType.POST_RETURNED_TO_REVIEW,
        "Post back under review",
        'Your post "{title}" is waiting for review again.',
    ),
}


def add_status_notification(
    db: Session,
    post: Post,
    previous: str,
    new_status: PostStatus,
    reason: str | None = None,
) -> Notification:
    """Queue the author's inbox entry for a status change. Caller owns the transaction."""
    notification_type, title, template = _STATUS_NOTICES[new_status]
    notification = Notification(
        user_id=post.author_id,
        type=notification_type.value,
        title=title,
        message=template.format(title=post.title),
        data={
            "post_id": post.id,
            "post_title": post.title,
            "previous_status": previous,
            "status": new_status.value,
            "reason": reason,
        },
        is_read=False,
    )
    db.add(notification)
    return notification


def list_notifications(
    db: Session,
    user_id: int,
    limit: int = 50,
    unread_only: bool = False,
) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def count_unread(db: Session, user_id: int) -> int:
    return db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
    ).scalar_one()


def _get_own(db: Session, notification_id: int, user_id: int) -> Notification:
    # Other users' notifications look the same as missing ones
    notification = db.get(Notification, notification_id)
    if not notification or notification.user_id != user_id:
        raise NotFoundError("Notification not found", path="notification_id")
    return notification


def mark_read(db: Session, notification_id: int, user_id: int) -> Notification:
    with atomic(db):
        notification = _get_own(db, notification_id, user_id)
        notification.is_read = True
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    """Mark every unread notification of the user as read. Returns how many changed."""
    with atomic(db):
        result = db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        updated = result.rowcount
    logger.debug("Marked %s notifications read for user=%s", updated, user_id)
    return updated


def delete_notification(db: Session, notification_id: int, user_id: int) -> None:
    with atomic(db):
        db.delete(_get_own(db, notification_id, user_id))
