"""Admin dashboard aggregates."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from warden.models.enums import PostStatus, ReportStatus
from warden.models.post import Post
from warden.models.report import PostReport
from warden.models.user import User
from warden.models.vote import PostVote
from warden.schemas.report import AdminStats


def get_admin_stats(db: Session) -> AdminStats:
    by_status = dict(
        db.execute(
            select(Post.status, func.count()).where(Post.is_deleted.is_(False)).group_by(Post.status)
        ).all()
    )
    open_reports = db.execute(
        select(func.count()).select_from(PostReport).where(PostReport.status == ReportStatus.PENDING.value)
    ).scalar_one()
    return AdminStats(
        total_users=db.execute(select(func.count()).select_from(User)).scalar_one(),
        total_posts=sum(by_status.values()),
        pending_posts=by_status.get(PostStatus.PENDING.value, 0),
        approved_posts=by_status.get(PostStatus.APPROVED.value, 0),
        rejected_posts=by_status.get(PostStatus.REJECTED.value, 0),
        open_reports=open_reports,
        total_votes=db.execute(select(func.count()).select_from(PostVote)).scalar_one(),
    )
