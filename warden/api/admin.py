"""Admin moderation API: report review, status overrides, reconciliation."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from warden.core.deps import require_admin
from warden.core.moderation_policy import ModerationPolicy, get_policy
from warden.db.session import get_db
from warden.models.user import User
from warden.schemas.post import PostDetail, PostStatusUpdate
from warden.schemas.report import (
    AdminStats,
    ModerationLogResponse,
    ReconcileResult,
    ReportResponse,
    ReportWithContext,
    ReviewRequest,
    ReviewResult,
    ScoreResult,
)
from warden.services.admin_service import get_admin_stats
from warden.services.moderation_service import get_moderation_log, set_post_status
from warden.services.post_service import build_post_detail, get_post
from warden.services.report_service import list_pending_reports, list_reports_for_post, review_report
from warden.services.score_service import reconcile_all_scores, recompute_post_score

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
def stats(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return get_admin_stats(db)


@router.get("/reports/pending", response_model=list[ReportWithContext])
def pending_reports(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return list_pending_reports(db, limit=limit, offset=offset)


@router.get("/posts/{post_id}/reports", response_model=list[ReportWithContext])
def post_reports(
    post_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return list_reports_for_post(db, post_id)


@router.patch("/reports/{report_id}/review", response_model=ReviewResult)
def review(
    report_id: int,
    data: ReviewRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_policy),
):
    """Approve (apply the report penalty) or reject an open report."""
    report, post = review_report(db, report_id, data.action, admin.id, policy)
    return ReviewResult(
        report=ReportResponse.model_validate(report),
        post_id=post.id,
        post_status=post.status,
        verification_score=post.verification_score,
        report_count=post.report_count,
    )


@router.patch("/posts/{post_id}/status", response_model=PostDetail)
def change_status(
    post_id: int,
    data: PostStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_policy),
):
    """Approve/reject a pending post, or force any transition. Always audited."""
    post = set_post_status(db, post_id, data.status, admin.id, policy, reason=data.reason)
    return build_post_detail(db, post, admin.id)


@router.get("/posts/{post_id}/moderation-log", response_model=list[ModerationLogResponse])
def moderation_log(
    post_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    get_post(db, post_id)
    return get_moderation_log(db, post_id)


@router.post("/posts/{post_id}/recompute", response_model=ScoreResult)
def recompute(
    post_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_policy),
):
    post = recompute_post_score(db, post_id, policy)
    return ScoreResult(
        post_id=post.id,
        verification_score=post.verification_score,
        report_count=post.report_count,
        status=post.status,
    )


@router.post("/posts/reconcile", response_model=ReconcileResult)
def reconcile(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    policy: ModerationPolicy = Depends(get_policy),
):
    """Recompute every post's score from the ledgers and report drift."""
    logger.info("Reconciliation triggered by admin=%s", admin.id)
    scanned, drifted = reconcile_all_scores(db, policy)
    return ReconcileResult(scanned=scanned, drifted=drifted)
