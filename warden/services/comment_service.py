"""Comment service. Comments feed the parent post's verification score."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from warden.core.errors import AuthorizationError, NotFoundError
from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import atomic
from warden.models.comment import Comment
from warden.models.enums import VoteType
from warden.models.user import User
from warden.models.vote import CommentVote
from warden.schemas.comment import CommentDetail
from warden.services.post_service import get_post, get_post_for_update
from warden.services.score_service import recompute_score


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment or comment.is_deleted:
        raise NotFoundError("Comment not found", path="comment_id")
    return comment


def create_comment(db: Session, author_id: int, post_id: int, content: str, policy: ModerationPolicy) -> Comment:
    with atomic(db):
        post = get_post_for_update(db, post_id)
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        db.add(comment)
        recompute_score(db, post, policy)
    db.refresh(comment)
    return comment


def update_comment(db: Session, comment_id: int, content: str, user: User) -> Comment:
    with atomic(db):
        comment = get_comment(db, comment_id)
        if comment.author_id != user.id:
            raise AuthorizationError("You can only update your own comments")
        comment.content = content
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, user: User, policy: ModerationPolicy) -> None:
    """Soft delete; the comment and its votes drop out of the post score."""
    comment = get_comment(db, comment_id)
    if comment.author_id != user.id and not user.is_admin:
        raise AuthorizationError("You can only delete your own comments")
    with atomic(db):
        post = get_post_for_update(db, comment.post_id, include_deleted=True)
        comment.is_deleted = True
        recompute_score(db, post, policy)


def list_comments(db: Session, post_id: int, viewer_id: int | None = None) -> list[CommentDetail]:
    get_post(db, post_id)
    comments = list(
        db.execute(
            select(Comment)
            .where(Comment.post_id == post_id, Comment.is_deleted.is_(False))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        .scalars()
        .all()
    )
    if not comments:
        return []
    ids = [c.id for c in comments]

    votes: dict[int, dict[str, int]] = {cid: {} for cid in ids}
    for comment_id, vote_type, count in db.execute(
        select(CommentVote.comment_id, CommentVote.type, func.count())
        .where(CommentVote.comment_id.in_(ids))
        .group_by(CommentVote.comment_id, CommentVote.type)
    ).all():
        votes[comment_id][vote_type] = count

    my_votes: dict[int, str] = {}
    if viewer_id is not None:
        my_votes = dict(
            db.execute(
                select(CommentVote.comment_id, CommentVote.type).where(
                    CommentVote.comment_id.in_(ids), CommentVote.user_id == viewer_id
                )
            ).all()
        )
    names = dict(
        db.execute(select(User.id, User.name).where(User.id.in_({c.author_id for c in comments}))).all()
    )

    return [
        CommentDetail.model_validate(c).model_copy(
            update={
                "author_name": names.get(c.author_id, ""),
                "up_votes": votes[c.id].get(VoteType.UP.value, 0),
                "down_votes": votes[c.id].get(VoteType.DOWN.value, 0),
                "my_vote": VoteType(my_votes[c.id]) if c.id in my_votes else None,
            }
        )
        for c in comments
    ]
