"""Post service."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from warden.core.errors import AuthorizationError, NotFoundError, ValidationError
from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import atomic
from warden.models.comment import Comment
from warden.models.enums import PostStatus, VoteType
from warden.models.post import Post
from warden.models.user import User
from warden.models.vote import PostVote
from warden.schemas.post import PostCreate, PostDetail, PostUpdate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Post.created_at,
    "crime_date": Post.crime_date,
    "verification_score": Post.verification_score,
}


@dataclass
class PostFilters:
    page: int = 1
    limit: int = 10
    search_term: str | None = None
    district: str | None = None
    division: str | None = None
    category: str | None = None
    status: str | None = None
    author_id: int | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


def get_post(db: Session, post_id: int) -> Post:
    """Get a live (not soft-deleted) post or raise NotFoundError."""
    post = db.get(Post, post_id)
    if not post or post.is_deleted:
        raise NotFoundError("Post not found", path="post_id")
    return post


def get_post_for_update(db: Session, post_id: int, include_deleted: bool = False) -> Post:
    """Lock the post row for the rest of the transaction.

    Every ledger mutation takes this lock first, so score/status/report_count
    writes on one post are serialized.
    """
    stmt = (
        select(Post)
        .where(Post.id == post_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    post = db.execute(stmt).scalar_one_or_none()
    if not post or (post.is_deleted and not include_deleted):
        raise NotFoundError("Post not found", path="post_id")
    return post


def create_post(db: Session, author_id: int, data: PostCreate, policy: ModerationPolicy) -> Post:
    """Insert a PENDING post at the baseline score, then run the automatic status rules."""
    from warden.services.moderation_service import apply_status_policy

    with atomic(db):
        post = Post(
            author_id=author_id,
            title=data.title,
            description=data.description,
            location=data.location,
            district=data.district,
            division=data.division,
            category=data.category.value,
            crime_date=data.crime_date,
            image_url=data.image_url,
            status=PostStatus.PENDING.value,
            verification_score=policy.baseline,
            report_count=0,
        )
        db.add(post)
        db.flush()
        apply_status_policy(db, post, policy)
    db.refresh(post)
    logger.info("Post created: id=%s author=%s", post.id, author_id)
    return post


def _can_manage(post: Post, user: User) -> bool:
    return post.author_id == user.id or user.is_admin


def update_post(db: Session, post_id: int, data: PostUpdate, user: User) -> Post:
    """Owner or admin edits content. Status changes go through moderation_service."""
    # image_url is the only nullable field; None elsewhere means "leave as is"
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field == "image_url"
    }
    if not changes:
        raise ValidationError("No fields to update")
    with atomic(db):
        post = get_post_for_update(db, post_id)
        if not _can_manage(post, user):
            raise AuthorizationError("You are not authorized to update this post")
        for field, value in changes.items():
            if field == "category" and value is not None:
                value = value.value
            setattr(post, field, value)
    db.refresh(post)
    return post


def delete_post(db: Session, post_id: int, user: User) -> None:
    """Soft delete. Votes, reports and comments keep referencing the row."""
    with atomic(db):
        post = get_post_for_update(db, post_id)
        if not _can_manage(post, user):
            raise AuthorizationError("You are not authorized to delete this post")
        post.is_deleted = True
    logger.info("Post soft-deleted: id=%s by user=%s", post_id, user.id)


def list_posts(db: Session, filters: PostFilters, viewer: User | None) -> tuple[list[Post], int]:
    """Paginated post listing. Non-admins see approved posts plus their own."""
    conditions = [Post.is_deleted.is_(False)]
    if filters.search_term:
        pattern = f"%{filters.search_term}%"
        conditions.append(
            or_(
                Post.title.ilike(pattern),
                Post.description.ilike(pattern),
                Post.location.ilike(pattern),
            )
        )
    if filters.district:
        conditions.append(Post.district == filters.district)
    if filters.division:
        conditions.append(Post.division == filters.division)
    if filters.category:
        conditions.append(Post.category == filters.category)
    if filters.author_id is not None:
        conditions.append(Post.author_id == filters.author_id)
    if filters.status:
        conditions.append(Post.status == filters.status)

    if viewer is None:
        conditions.append(Post.status == PostStatus.APPROVED.value)
    elif not viewer.is_admin:
        conditions.append(or_(Post.status == PostStatus.APPROVED.value, Post.author_id == viewer.id))

    total = db.execute(select(func.count()).select_from(Post).where(*conditions)).scalar_one()

    column = SORTABLE_FIELDS.get(filters.sort_by, Post.created_at)
    order = column.asc() if filters.sort_order == "asc" else column.desc()
    result = db.execute(
        select(Post)
        .where(*conditions)
        .order_by(order, Post.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return list(result.scalars().all()), total


def build_post_details(db: Session, posts: list[Post], viewer_id: int | None = None) -> list[PostDetail]:
    """Attach vote counts, comment counts and the viewer's vote to each post."""
    if not posts:
        return []
    ids = [p.id for p in posts]

    votes: dict[int, dict[str, int]] = {pid: {} for pid in ids}
    rows = db.execute(
        select(PostVote.post_id, PostVote.type, func.count())
        .where(PostVote.post_id.in_(ids))
        .group_by(PostVote.post_id, PostVote.type)
    ).all()
    for post_id, vote_type, count in rows:
        votes[post_id][vote_type] = count

    comment_counts = dict(
        db.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(ids), Comment.is_deleted.is_(False))
            .group_by(Comment.post_id)
        ).all()
    )

    my_votes: dict[int, str] = {}
    if viewer_id is not None:
        my_votes = dict(
            db.execute(
                select(PostVote.post_id, PostVote.type).where(
                    PostVote.post_id.in_(ids), PostVote.user_id == viewer_id
                )
            ).all()
        )

    author_ids = {p.author_id for p in posts}
    names = dict(db.execute(select(User.id, User.name).where(User.id.in_(author_ids))).all())

    details = []
    for post in posts:
        base = PostDetail.model_validate(post)
        details.append(
            base.model_copy(
                update={
                    "author_name": names.get(post.author_id, ""),
                    "up_votes": votes[post.id].get(VoteType.UP.value, 0),
                    "down_votes": votes[post.id].get(VoteType.DOWN.value, 0),
                    "comment_count": comment_counts.get(post.id, 0),
                    "my_vote": VoteType(my_votes[post.id]) if post.id in my_votes else None,
                }
            )
        )
    return details


def build_post_detail(db: Session, post: Post, viewer_id: int | None = None) -> PostDetail:
    return build_post_details(db, [post], viewer_id)[0]
