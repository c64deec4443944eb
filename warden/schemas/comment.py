"""Comment schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from warden.models.enums import VoteType


class CommentCreate(BaseModel):
    post_id: int
    content: str = Field(min_length=1, max_length=5000)


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentDetail(CommentResponse):
    author_name: str = ""
    up_votes: int = 0
    down_votes: int = 0
    my_vote: VoteType | None = None
