"""Comments API."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from warden.core.deps import get_current_user
from warden.core.moderation_policy import ModerationPolicy, get_policy
from warden.db.session import get_db
from warden.models.enums import VoteType
from warden.models.user import User
from warden.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from warden.schemas.common import MessageResponse
from warden.services.comment_service import create_comment, delete_comment, update_comment
from warden.services.vote_service import cast_comment_vote, retract_comment_vote

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("", response_model=CommentResponse, status_code=201)
def create(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return create_comment(db, current_user.id, data.post_id, data.content, policy)


@router.patch("/{comment_id}", response_model=CommentResponse)
def update(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_comment(db, comment_id, data.content, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    delete_comment(db, comment_id, current_user, policy)
    return MessageResponse(message="Comment deleted successfully")


@router.post("/{comment_id}/upvote", response_model=CommentResponse)
def upvote(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return cast_comment_vote(db, current_user.id, comment_id, VoteType.UP, policy)


@router.delete("/{comment_id}/upvote", response_model=CommentResponse)
def remove_upvote(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return retract_comment_vote(db, current_user.id, comment_id, VoteType.UP, policy)


@router.post("/{comment_id}/downvote", response_model=CommentResponse)
def downvote(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return cast_comment_vote(db, current_user.id, comment_id, VoteType.DOWN, policy)


@router.delete("/{comment_id}/downvote", response_model=CommentResponse)
def remove_downvote(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: ModerationPolicy = Depends(get_policy),
):
    return retract_comment_vote(db, current_user.id, comment_id, VoteType.DOWN, policy)
