"""Post status state machine: automatic rules, admin decisions and overrides."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from warden.core.errors import ConflictError, ValidationError
from warden.core.moderation_policy import ModerationPolicy
from warden.core.ws_manager import ws_manager
from warden.db.session import atomic, on_commit
from warden.models.enums import ModerationAction, PostStatus
from warden.models.moderation_log import ModerationLog
from warden.models.post import Post
from warden.services.notification_service import add_status_notification
from warden.services.post_service import get_post_for_update

logger = logging.getLogger(__name__)


def transition(
    db: Session,
    post: Post,
    new_status: PostStatus,
    action: ModerationAction,
    actor_id: int | None = None,
    reason: str | None = None,
) -> ModerationLog:
    """Move post to new_status, append the audit entry and the author's notification.

    Caller owns the transaction. The WebSocket push goes out only after commit,
    with a payload captured here so the callback never reloads the post.
    """
    previous = post.status
    post.status = new_status.value
    entry = ModerationLog(
        post_id=post.id,
        actor_id=actor_id,
        action=action.value,
        previous_status=previous,
        new_status=new_status.value,
        reason=reason,
    )
    db.add(entry)
    logger.info(
        "Post %s: %s -> %s (%s by %s)",
        post.id,
        previous,
        new_status.value,
        action.value,
        actor_id if actor_id is not None else "system",
    )
    notification = add_status_notification(db, post, previous, new_status, reason)
    db.flush()
    author_id = post.author_id
    payload = {
        "post_id": post.id,
        "title": post.title,
        "previous_status": previous,
        "status": new_status.value,
        "notification_id": notification.id,
    }
    on_commit(db, lambda: ws_manager.notify(author_id, "post.status_changed", payload))
    return entry


def _auto_reject_reasons(post: Post, policy: ModerationPolicy) -> list[str]:
    reasons = []
    if post.verification_score <= policy.auto_reject_score_threshold:
        reasons.append(
            f"verification score {post.verification_score} <= {policy.auto_reject_score_threshold}"
        )
    if post.report_count >= policy.auto_reject_report_threshold:
        reasons.append(f"report count {post.report_count} >= {policy.auto_reject_report_threshold}")
    return reasons


def apply_status_policy(db: Session, post: Post, policy: ModerationPolicy) -> PostStatus | None:
    """Apply the automatic transitions after score/report_count changed.

    Returns the new status when a transition happened.
    """
    status = PostStatus(post.status)
    if status == PostStatus.REJECTED:
        return None

    eligible = status == PostStatus.PENDING or policy.auto_reject_approved_posts
    if policy.auto_reject_enabled and eligible:
        reasons = _auto_reject_reasons(post, policy)
        if reasons:
            post.auto_rejected = True
            transition(db, post, PostStatus.REJECTED, ModerationAction.AUTO_REJECT, reason="; ".join(reasons))
            return PostStatus.REJECTED

    threshold = policy.auto_approve_score_threshold
    if status == PostStatus.PENDING and threshold is not None and post.verification_score >= threshold:
        transition(
            db,
            post,
            PostStatus.APPROVED,
            ModerationAction.AUTO_APPROVE,
            reason=f"verification score {post.verification_score} >= {threshold}",
        )
        return PostStatus.APPROVED
    return None


def set_post_status(
    db: Session,
    post_id: int,
    new_status: PostStatus,
    actor_id: int,
    policy: ModerationPolicy,
    reason: str | None = None,
) -> Post:
    """Admin decision on a pending post, or a forced override of a settled one."""
    with atomic(db):
        post = get_post_for_update(db, post_id)
        if post.status == new_status.value:
            raise ValidationError(f"Post is already {new_status.value}", path="status")
        if (
            post.status == PostStatus.REJECTED.value
            and post.auto_rejected
            and not policy.allow_override_of_auto_rejection
        ):
            raise ConflictError("Automatically rejected posts cannot be overridden", path="status")

        action = ModerationAction.ADMIN_REVIEW if post.status == PostStatus.PENDING.value else ModerationAction.OVERRIDE
        if new_status != PostStatus.REJECTED:
            post.auto_rejected = False
        transition(db, post, new_status, action, actor_id=actor_id, reason=reason)
    db.refresh(post)
    return post


def get_moderation_log(db: Session, post_id: int) -> list[ModerationLog]:
    result = db.execute(
        select(ModerationLog)
        .where(ModerationLog.post_id == post_id)
        .order_by(ModerationLog.created_at.asc(), ModerationLog.id.asc())
    )
    return list(result.scalars().all())
