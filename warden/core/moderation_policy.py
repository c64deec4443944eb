"""Score weights and status thresholds for post moderation."""

from __future__ import annotations

from dataclasses import dataclass

from warden.core.config import Settings, settings


@dataclass(frozen=True)
class ModerationPolicy:
    """Tunable knobs for the verification score and the post status rules.

    Ledger services take a policy argument instead of reading settings, so a
    test (or a reconciliation run) can use a different policy without touching
    process-wide state.
    """

    baseline: int = 50
    floor: int = 0
    ceiling: int = 100
    upvote_weight: float = 2.0
    downvote_weight: float = 1.0
    comment_weight: float = 1.0
    comment_upvote_weight: float = 0.5
    comment_downvote_weight: float = 0.25
    report_penalty: int = 5

    auto_reject_enabled: bool = True
    # Reject when score <= this value
    auto_reject_score_threshold: int = 0
    # Reject when report_count >= this value
    auto_reject_report_threshold: int = 10
    auto_reject_approved_posts: bool = False
    # None disables auto-approval
    auto_approve_score_threshold: int | None = None
    allow_override_of_auto_rejection: bool = True

    @classmethod
    def from_settings(cls, cfg: Settings) -> ModerationPolicy:
        return cls(
            baseline=cfg.score_baseline,
            floor=cfg.score_floor,
            ceiling=cfg.score_ceiling,
            upvote_weight=cfg.upvote_weight,
            downvote_weight=cfg.downvote_weight,
            comment_weight=cfg.comment_weight,
            comment_upvote_weight=cfg.comment_upvote_weight,
            comment_downvote_weight=cfg.comment_downvote_weight,
            report_penalty=cfg.report_penalty,
            auto_reject_enabled=cfg.auto_reject_enabled,
            auto_reject_score_threshold=cfg.auto_reject_score_threshold,
            auto_reject_report_threshold=cfg.auto_reject_report_threshold,
            auto_reject_approved_posts=cfg.auto_reject_approved_posts,
            auto_approve_score_threshold=cfg.auto_approve_score_threshold,
            allow_override_of_auto_rejection=cfg.allow_override_of_auto_rejection,
        )


def get_policy() -> ModerationPolicy:
    """FastAPI dependency returning the policy configured for this process."""
    return ModerationPolicy.from_settings(settings)
