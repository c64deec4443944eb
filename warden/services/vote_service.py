"""Vote ledgers for posts and comments."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from warden.core.errors import NotFoundError
from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import atomic
from warden.models.comment import Comment
from warden.models.enums import VoteType
from warden.models.post import Post
from warden.models.vote import CommentVote, PostVote
from warden.services.post_service import get_post_for_update
from warden.services.score_service import recompute_score

logger = logging.getLogger(__name__)


def get_post_vote(db: Session, user_id: int, post_id: int) -> PostVote | None:
    return db.execute(
        select(PostVote).where(PostVote.user_id == user_id, PostVote.post_id == post_id)
    ).scalar_one_or_none()


def get_comment_vote(db: Session, user_id: int, comment_id: int) -> CommentVote | None:
    return db.execute(
        select(CommentVote).where(CommentVote.user_id == user_id, CommentVote.comment_id == comment_id)
    ).scalar_one_or_none()


def cast_post_vote(
    db: Session,
    user_id: int,
    post_id: int,
    vote_type: VoteType,
    policy: ModerationPolicy,
) -> Post:
    """Record the user's vote on a post.

    No row: insert. Opposite type: flip the existing row in place. Same type:
    nothing changes.
    """
    with atomic(db):
        post = get_post_for_update(db, post_id)
        vote = get_post_vote(db, user_id, post_id)
        if vote is None:
            db.add(PostVote(user_id=user_id, post_id=post_id, type=vote_type.value))
        elif vote.type != vote_type.value:
            vote.type = vote_type.value
        else:
            return post
        recompute_score(db, post, policy)
    logger.debug("Vote %s by user=%s on post=%s", vote_type.value, user_id, post_id)
    db.refresh(post)
    return post


def retract_post_vote(
    db: Session,
    user_id: int,
    post_id: int,
    vote_type: VoteType,
    policy: ModerationPolicy,
) -> Post:
    """Remove the user's vote if it has the given type; otherwise do nothing."""
    with atomic(db):
        post = get_post_for_update(db, post_id)
        vote = get_post_vote(db, user_id, post_id)
        if vote is None or vote.type != vote_type.value:
            return post
        db.delete(vote)
        recompute_score(db, post, policy)
    db.refresh(post)
    return post


def _lock_comment(db: Session, comment_id: int) -> tuple[Comment, Post]:
    comment = db.get(Comment, comment_id)
    if not comment or comment.is_deleted:
        raise NotFoundError("Comment not found", path="comment_id")
    post = get_post_for_update(db, comment.post_id)
    return comment, post


def cast_comment_vote(
    db: Session,
    user_id: int,
    comment_id: int,
    vote_type: VoteType,
    policy: ModerationPolicy,
) -> Comment:
    """Same rules as cast_post_vote, on the comment ledger. Rescores the parent post."""
    with atomic(db):
        comment, post = _lock_comment(db, comment_id)
        vote = get_comment_vote(db, user_id, comment_id)
        if vote is None:
            db.add(CommentVote(user_id=user_id, comment_id=comment_id, type=vote_type.value))
        elif vote.type != vote_type.value:
            vote.type = vote_type.value
        else:
            return comment
        recompute_score(db, post, policy)
    db.refresh(comment)
    return comment


def retract_comment_vote(
    db: Session,
    user_id: int,
    comment_id: int,
    vote_type: VoteType,
    policy: ModerationPolicy,
) -> Comment:
    with atomic(db):
        comment, post = _lock_comment(db, comment_id)
        vote = get_comment_vote(db, user_id, comment_id)
        if vote is None or vote.type != vote_type.value:
            return comment
        db.delete(vote)
        recompute_score(db, post, policy)
    db.refresh(comment)
    return comment
