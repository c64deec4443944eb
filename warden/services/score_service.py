"""Verification score aggregation and reconciliation.

The stored ``Post.verification_score`` and ``Post.report_count`` are caches.
``collect_counts`` + ``compute_score`` rebuild them from the vote, comment and
report ledgers, and ``reconcile_all_scores`` runs that rebuild over every post
to bound drift from incremental updates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import atomic
from warden.models.comment import Comment
from warden.models.enums import ReportStatus, VoteType
from warden.models.post import Post
from warden.models.report import PostReport
from warden.models.vote import CommentVote, PostVote
from warden.services.moderation_service import apply_status_policy
from warden.services.post_service import get_post_for_update

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerCounts:
    up_votes: int = 0
    down_votes: int = 0
    comments: int = 0
    comment_up_votes: int = 0
    comment_down_votes: int = 0
    approved_reports: int = 0
    open_reports: int = 0

    @property
    def report_count(self) -> int:
        """Reports that were not dismissed by a reviewer."""
        return self.approved_reports + self.open_reports


def compute_score(counts: LedgerCounts, policy: ModerationPolicy) -> int:
    raw = (
        policy.baseline
        + policy.upvote_weight * counts.up_votes
        - policy.downvote_weight * counts.down_votes
        + policy.comment_weight * counts.comments
        + policy.comment_upvote_weight * counts.comment_up_votes
        - policy.comment_downvote_weight * counts.comment_down_votes
        - policy.report_penalty * counts.approved_reports
    )
    return max(policy.floor, min(policy.ceiling, math.floor(raw)))


def collect_counts(db: Session, post_id: int) -> LedgerCounts:
    """Read the ledgers for one post, including unflushed changes in this session."""
    db.flush()

    votes = dict(
        db.execute(
            select(PostVote.type, func.count()).where(PostVote.post_id == post_id).group_by(PostVote.type)
        ).all()
    )

    live_comments = (Comment.post_id == post_id, Comment.is_deleted.is_(False))
    comments = db.execute(select(func.count()).select_from(Comment).where(*live_comments)).scalar_one()
    comment_votes = dict(
        db.execute(
            select(CommentVote.type, func.count())
            .join(Comment, CommentVote.comment_id == Comment.id)
            .where(*live_comments)
            .group_by(CommentVote.type)
        ).all()
    )

    reports = dict(
        db.execute(
            select(PostReport.status, func.count())
            .where(PostReport.post_id == post_id)
            .group_by(PostReport.status)
        ).all()
    )

    return LedgerCounts(
        up_votes=votes.get(VoteType.UP.value, 0),
        down_votes=votes.get(VoteType.DOWN.value, 0),
        comments=comments,
        comment_up_votes=comment_votes.get(VoteType.UP.value, 0),
        comment_down_votes=comment_votes.get(VoteType.DOWN.value, 0),
        approved_reports=reports.get(ReportStatus.APPROVED.value, 0),
        open_reports=reports.get(ReportStatus.PENDING.value, 0),
    )


def recompute_score(db: Session, post: Post, policy: ModerationPolicy) -> Post:
    """Rebuild score and report_count from the ledgers, then apply status rules.

    Runs inside the caller's transaction; the caller must hold the post lock.
    """
    counts = collect_counts(db, post.id)
    post.verification_score = compute_score(counts, policy)
    post.report_count = counts.report_count
    apply_status_policy(db, post, policy)
    db.flush()
    return post


def recompute_post_score(db: Session, post_id: int, policy: ModerationPolicy) -> Post:
    """Standalone recompute of one post in its own transaction."""
    with atomic(db):
        post = get_post_for_update(db, post_id, include_deleted=True)
        recompute_score(db, post, policy)
    db.refresh(post)
    return post


def reconcile_all_scores(db: Session, policy: ModerationPolicy) -> tuple[int, list[int]]:
    """Recompute every live post, one short transaction per post.

    Returns (posts scanned, ids whose stored values had drifted).
    """
    post_ids = list(
        db.execute(select(Post.id).where(Post.is_deleted.is_(False)).order_by(Post.id)).scalars().all()
    )
    drifted: list[int] = []
    for post_id in post_ids:
        with atomic(db):
            post = get_post_for_update(db, post_id, include_deleted=True)
            before = (post.verification_score, post.report_count)
            recompute_score(db, post, policy)
            after = (post.verification_score, post.report_count)
        if before != after:
            drifted.append(post_id)
            logger.warning("Score drift on post %s: %s -> %s", post_id, before, after)
    logger.info("Reconciled %s posts, %s drifted", len(post_ids), len(drifted))
    return len(post_ids), drifted
