"""SQLAlchemy models."""

from __future__ import annotations

from warden.models.comment import Comment
from warden.models.moderation_log import ModerationLog
from warden.models.notification import Notification
from warden.models.post import Post
from warden.models.report import PostReport
from warden.models.user import User
from warden.models.vote import CommentVote, PostVote

__all__ = [
    "User",
    "Post",
    "Comment",
    "PostVote",
    "CommentVote",
    "PostReport",
    "ModerationLog",
    "Notification",
]
