"""Recompute every post's verification score from the ledgers.

Run on a schedule (cron, k8s CronJob) to bound drift in the cached
score/report_count columns:

    python -m warden.jobs.reconcile_scores
"""

from __future__ import annotations

import logging

from warden.core.config import settings
from warden.core.moderation_policy import ModerationPolicy
from warden.db.session import SessionLocal
from warden.services.score_service import reconcile_all_scores

logger = logging.getLogger("warden.jobs.reconcile_scores")


def run() -> int:
    """Reconcile all posts. Returns the number of posts that had drifted."""
    policy = ModerationPolicy.from_settings(settings)
    db = SessionLocal()
    try:
        scanned, drifted = reconcile_all_scores(db, policy)
    finally:
        db.close()
    if drifted:
        logger.warning("Corrected %s of %s posts: %s", len(drifted), scanned, drifted)
    return len(drifted)


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    run()


if __name__ == "__main__":
    main()
