"""Report and moderation schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from warden.models.enums import ReportReason, ReviewAction


class ReportCreate(BaseModel):
    reason: ReportReason
    description: str | None = Field(default=None, max_length=1000)


class ReportResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    reason: str
    description: str | None
    status: str
    reviewed_by: int | None
    reviewed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportWithContext(ReportResponse):
    """Report enriched for the admin queue."""

    reporter_name: str = ""
    reporter_email: str = ""
    post_title: str = ""
    post_verification_score: int | None = None


class ReviewRequest(BaseModel):
    action: ReviewAction


class ReviewResult(BaseModel):
    report: ReportResponse
    post_id: int
    post_status: str
    verification_score: int
    report_count: int


class ModerationLogResponse(BaseModel):
    id: int
    post_id: int
    actor_id: int | None
    action: str
    previous_status: str
    new_status: str
    reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ScoreResult(BaseModel):
    post_id: int
    verification_score: int
    report_count: int
    status: str


class ReconcileResult(BaseModel):
    scanned: int
    drifted: list[int]


class AdminStats(BaseModel):
    total_users: int
    total_posts: int
    pending_posts: int
    approved_posts: int
    rejected_posts: int
    open_reports: int
    total_votes: int
