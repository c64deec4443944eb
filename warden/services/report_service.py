"""Report ledger and the admin review of reports."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import case, select
from sqlalchemy.orm import Session, aliased

from warden.core.errors import ConflictError, NotFoundError, ValidationError
from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import atomic
from warden.models.enums import ReportReason, ReportStatus, ReviewAction
from warden.models.post import Post
from warden.models.report import PostReport
from warden.models.user import User
from warden.schemas.report import ReportWithContext
from warden.services.moderation_service import apply_status_policy
from warden.services.post_service import get_post_for_update
from warden.services.score_service import recompute_score

logger = logging.getLogger(__name__)


def get_open_report(db: Session, user_id: int, post_id: int) -> PostReport | None:
    return db.execute(
        select(PostReport).where(
            PostReport.user_id == user_id,
            PostReport.post_id == post_id,
            PostReport.status == ReportStatus.PENDING.value,
        )
    ).scalar_one_or_none()


def file_report(
    db: Session,
    user_id: int,
    post_id: int,
    reason: ReportReason,
    policy: ModerationPolicy,
    description: str | None = None,
) -> PostReport:
    """File a PENDING report and bump the post's report_count.

    Filing does not touch the score; only an approved report carries the
    penalty. The higher report_count can still trip the auto-reject rule.
    """
    with atomic(db):
        post = get_post_for_update(db, post_id)
        if post.author_id == user_id:
            raise ValidationError("You cannot report your own post", path="post_id")
        if get_open_report(db, user_id, post_id):
            raise ConflictError("You already have an open report on this post", path="post_id")

        report = PostReport(
            post_id=post_id,
            user_id=user_id,
            reason=reason.value,
            description=description,
            status=ReportStatus.PENDING.value,
        )
        db.add(report)
        # Increment in SQL; the loaded value is stale wherever FOR UPDATE is a no-op (SQLite)
        post.report_count = Post.report_count + 1
        db.flush()
        apply_status_policy(db, post, policy)
    db.refresh(report)
    logger.info("Report %s filed by user=%s on post=%s (%s)", report.id, user_id, post_id, reason.value)
    return report


def review_report(
    db: Session,
    report_id: int,
    action: ReviewAction,
    reviewer_id: int,
    policy: ModerationPolicy,
) -> tuple[PostReport, Post]:
    """Approve or dismiss an open report and rescore its post.

    Only PENDING reports can be reviewed, so a report is never penalized twice.
    """
    report = db.get(PostReport, report_id)
    if not report:
        raise NotFoundError("Pending report not found", path="report_id")

    with atomic(db):
        # Post first, then report: the same lock order as every other ledger write.
        post = get_post_for_update(db, report.post_id, include_deleted=True)
        report = db.execute(
            select(PostReport)
            .where(PostReport.id == report_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()
        if report.status != ReportStatus.PENDING.value:
            raise NotFoundError("Pending report not found", path="report_id")

        report.status = (
            ReportStatus.APPROVED.value if action == ReviewAction.APPROVE else ReportStatus.REJECTED.value
        )
        report.reviewed_by = reviewer_id
        report.reviewed_at = datetime.now(timezone.utc)
        recompute_score(db, post, policy)

    db.refresh(report)
    db.refresh(post)
    logger.info(
        "Report %s %s by admin=%s; post %s score=%s status=%s",
        report_id,
        report.status,
        reviewer_id,
        post.id,
        post.verification_score,
        post.status,
    )
    return report, post


_STATUS_ORDER = case(
    (PostReport.status == ReportStatus.PENDING.value, 1),
    (PostReport.status == ReportStatus.APPROVED.value, 2),
    else_=3,
)


def _with_context(rows) -> list[ReportWithContext]:
    out = []
    for report, reporter_name, reporter_email, post_title, post_score in rows:
        base = ReportWithContext.model_validate(report)
        out.append(
            base.model_copy(
                update={
                    "reporter_name": reporter_name,
                    "reporter_email": reporter_email,
                    "post_title": post_title,
                    "post_verification_score": post_score,
                }
            )
        )
    return out


def _context_query():
    reporter = aliased(User)
    return (
        select(PostReport, reporter.name, reporter.email, Post.title, Post.verification_score)
        .join(reporter, PostReport.user_id == reporter.id)
        .join(Post, PostReport.post_id == Post.id)
    )


def list_pending_reports(db: Session, limit: int = 50, offset: int = 0) -> list[ReportWithContext]:
    """Admin queue: open reports on live posts, newest first."""
    rows = db.execute(
        _context_query()
        .where(PostReport.status == ReportStatus.PENDING.value, Post.is_deleted.is_(False))
        .order_by(PostReport.created_at.desc(), PostReport.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return _with_context(rows)


def list_reports_for_post(db: Session, post_id: int) -> list[ReportWithContext]:
    """All reports on a post, open ones first."""
    if not db.get(Post, post_id):
        raise NotFoundError("Post not found", path="post_id")
    rows = db.execute(
        _context_query()
        .where(PostReport.post_id == post_id)
        .order_by(_STATUS_ORDER, PostReport.created_at.desc(), PostReport.id.desc())
    ).all()
    return _with_context(rows)
