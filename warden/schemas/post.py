"""Post schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from warden.models.enums import PostCategory, PostStatus, VoteType


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=255)
    district: str = Field(min_length=1, max_length=100)
    division: str = Field(min_length=1, max_length=100)
    crime_date: datetime
    category: PostCategory = PostCategory.OTHERS
    image_url: str | None = Field(default=None, max_length=1024)


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    district: str | None = Field(default=None, min_length=1, max_length=100)
    division: str | None = Field(default=None, min_length=1, max_length=100)
    crime_date: datetime | None = None
    category: PostCategory | None = None
    image_url: str | None = Field(default=None, max_length=1024)


class PostResponse(BaseModel):
    id: int
    author_id: int
    title: str
    description: str
    location: str
    district: str
    division: str
    category: str
    crime_date: datetime
    image_url: str | None
    status: str
    verification_score: int
    report_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostDetail(PostResponse):
    """Post with ledger-derived counts and the caller's own vote."""

    author_name: str = ""
    up_votes: int = 0
    down_votes: int = 0
    comment_count: int = 0
    my_vote: VoteType | None = None


class PostListMeta(BaseModel):
    total: int
    page: int
    limit: int


class PostListResponse(BaseModel):
    meta: PostListMeta
    data: list[PostDetail]


class PostStatusUpdate(BaseModel):
    status: PostStatus
    reason: str | None = Field(default=None, max_length=1000)
