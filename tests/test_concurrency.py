"""Ledger writes racing on one post from separate sessions."""

import threading
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import TestingSessionLocal
from warden.core.errors import ConflictError, classify_db_error
from warden.core.moderation_policy import ModerationPolicy
from warden.models.enums import ReportReason, ReportStatus, VoteType
from warden.models.post import Post
from warden.models.report import PostReport
from warden.models.vote import PostVote
from warden.services.report_service import file_report
from warden.services.score_service import collect_counts, compute_score
from warden.services.vote_service import cast_post_vote

WORKERS = 8


def _run_together(fn, args):
    barrier = threading.Barrier(len(args))

    def _task(arg):
        with TestingSessionLocal() as session:
            barrier.wait()
            return fn(session, arg)

    with ThreadPoolExecutor(max_workers=len(args)) as pool:
        return list(pool.map(_task, args))


def _reload(db, post_id) -> Post:
    db.expire_all()
    return db.get(Post, post_id)


def test_concurrent_upvotes_are_all_scored(db, make_user, make_post):
    post = make_post(make_user())
    voters = [make_user() for _ in range(WORKERS)]
    policy = ModerationPolicy()

    _run_together(lambda session, voter: cast_post_vote(session, voter.id, post["id"], VoteType.UP, policy), voters)

    row = _reload(db, post["id"])
    votes = db.scalar(select(func.count()).select_from(PostVote).where(PostVote.post_id == post["id"]))
    assert votes == WORKERS
    assert row.verification_score == compute_score(collect_counts(db, post["id"]), policy)
    assert row.verification_score == policy.baseline + 2 * WORKERS


def test_concurrent_reports_from_different_users_all_count(db, make_user, make_post):
    post = make_post(make_user())
    reporters = [make_user() for _ in range(WORKERS)]
    policy = ModerationPolicy(auto_reject_report_threshold=WORKERS + 1)

    _run_together(
        lambda session, reporter: file_report(session, reporter.id, post["id"], ReportReason.SPAM, policy),
        reporters,
    )

    row = _reload(db, post["id"])
    assert row.report_count == WORKERS
    assert row.status == "PENDING"


def test_concurrent_duplicate_report_is_filed_once(db, make_user, make_post):
    post = make_post(make_user())
    reporter = make_user()
    policy = ModerationPolicy()

    def _file(session, _):
        try:
            file_report(session, reporter.id, post["id"], ReportReason.FALSE_INFO, policy)
        except ConflictError:
            return "conflict"
        except IntegrityError as exc:
            return "conflict" if isinstance(classify_db_error(exc), ConflictError) else "error"
        return "filed"

    outcomes = _run_together(_file, [1, 2])

    assert sorted(outcomes) == ["conflict", "filed"]
    assert _reload(db, post["id"]).report_count == 1
    open_reports = db.scalar(
        select(func.count()).select_from(PostReport).where(
            PostReport.post_id == post["id"],
            PostReport.user_id == reporter.id,
            PostReport.status == ReportStatus.PENDING.value,
        )
    )
    assert open_reports == 1
