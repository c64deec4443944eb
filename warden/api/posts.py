"""Posts API: CRUD, votes and reports."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from warden.core.deps import get_current_user, get_optional_user
from warden.core.moderation_policy import ModerationPolicy, get_policy
from warden.db.session import get_db
from warden.models.enums import PostCategory, PostStatus, VoteType
from warden.models.user import User
from warden.schemas.comment import CommentDetail
from warden.schemas.common import MessageResponse
from warden.schemas.post import PostCreate, PostDetail, PostListMeta, PostListResponse, PostUpdate
from warden.schemas.report import ReportCreate, ReportResponse
from warden.services.comment_service import list_comments
from warden.services.post_service import (
    PostFilters,
    build_post_detail,
    build_post_details,
    create_post,
    delete_post,
    get_post,
    list_posts,
    update_post,
)
from warden.services.report_service import file_report
from warden.services.vote_service import cast_post_vote, retract_post_vote

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostDetail, status_code=201)
def create(
    data: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    """Submit a crime report. New posts start PENDING at the baseline score before the auto rules run."""
    post = create_post(db, current_user.id, data, policy)
    return build_post_detail(db, post, current_user.id)


@router.get("", response_model=PostListResponse)
def list_all(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search_term: str | None = Query(default=None, max_length=200),
    district: str | None = None,
    division: str | None = None,
    category: PostCategory | None = None,
    status: PostStatus | None = None,
    author_id: int | None = None,
    sort_by: str = Query(default="created_at", pattern="^(created_at|crime_date|verification_score)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    """List posts. Anonymous users and non-admins see approved posts (plus their own)."""
    filters = PostFilters(
        page=page,
        limit=limit,
        search_term=search_term,
        district=district,
        division=division,
        category=category.value if category else None,
        status=status.value if status else None,
        author_id=author_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    posts, total = list_posts(db, filters, viewer)
    viewer_id = viewer.id if viewer else None
    return PostListResponse(
        meta=PostListMeta(total=total, page=page, limit=limit),
        data=build_post_details(db, posts, viewer_id),
    )


@router.get("/{post_id}", response_model=PostDetail)
def get_one(
    post_id: int,
    db: Session = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    post = get_post(db, post_id)
    return build_post_detail(db, post, viewer.id if viewer else None)


@router.patch("/{post_id}", response_model=PostDetail)
def update(
    post_id: int,
    data: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Edit post content. Owner or admin."""
    post = update_post(db, post_id, data, current_user)
    return build_post_detail(db, post, current_user.id)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    delete_post(db, post_id, current_user)
    return MessageResponse(message="Post deleted successfully")


@router.get("/{post_id}/comments", response_model=list[CommentDetail])
def comments(
    post_id: int,
    db: Session = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    return list_comments(db, post_id, viewer.id if viewer else None)


# ---- Votes ----


def _cast(db: Session, user: User, post_id: int, vote_type: VoteType, policy: ModerationPolicy) -> PostDetail:
    post = cast_post_vote(db, user.id, post_id, vote_type, policy)
    return build_post_detail(db, post, user.id)


def _retract(db: Session, user: User, post_id: int, vote_type: VoteType, policy: ModerationPolicy) -> PostDetail:
    post = retract_post_vote(db, user.id, post_id, vote_type, policy)
    return build_post_detail(db, post, user.id)


@router.post("/{post_id}/upvote", response_model=PostDetail)
def upvote(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return _cast(db, current_user, post_id, VoteType.UP, policy)


@router.delete("/{post_id}/upvote", response_model=PostDetail)
def remove_upvote(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return _retract(db, current_user, post_id, VoteType.UP, policy)


@router.post("/{post_id}/downvote", response_model=PostDetail)
def downvote(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return _cast(db, current_user, post_id, VoteType.DOWN, policy)


@router.delete("/{post_id}/downvote", response_model=PostDetail)
def remove_downvote(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return _retract(db, current_user, post_id, VoteType.DOWN, policy)


# ---- Reports ----


@router.post("/{post_id}/report", response_model=ReportResponse, status_code=201)
def report(
    post_id: int,
    data: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    """Report a post. One open report per user per post."""
    return file_report(db, current_user.id, post_id, data.reason, policy, description=data.description)
