"""Tests for the platform aggregator and admin-only database operations."""

from datetime import datetime, timezone

import pytest

from evolvefit.core.errors import NoActiveSession, PermissionDenied
from evolvefit.core.models import (
    CommunityPost,
    Contest,
    ContestSubmission,
    SubmissionStatus,
)
from evolvefit.core.stats import REVENUE_PER_ACCOUNT


ADMIN_EMAIL = "coach@evolvefit.app"
ADMIN_PASSWORD = "admin-pass"

BREAKFAST = datetime(2025, 3, 14, 8, 0, tzinfo=timezone.utc)


class TestSnapshot:
    """Tests for PlatformAggregator.snapshot."""

    def test_empty_platform(self, db):
        stats = db.aggregator.snapshot()

        assert stats.user_count == 0
        assert stats.total_meals_logged == 0
        assert stats.pending_verifications == 0
        assert stats.estimated_revenue == 0
        assert stats.estimated_storage_bytes == 0

    def test_counts(self, db, make_meal):
        db.directory.register("a@x.com")
        db.logs.append_meal(make_meal(BREAKFAST))
        db.logs.append_meal(make_meal(BREAKFAST.replace(day=13)))
        db.directory.register("b@x.com")
        db.logs.append_meal(make_meal(BREAKFAST))
        db.contests.create(Contest(id=1, title="Plank Month"))
        db.posts.create(CommunityPost(id=1, user="Asha"))
        db.submissions.create(ContestSubmission(id="s1", contest_id=1))
        db.submissions.create(ContestSubmission(id="s2", contest_id=1, status=SubmissionStatus.APPROVED))

        stats = db.aggregator.snapshot()

        assert stats.user_count == 2
        assert stats.total_meals_logged == 3
        assert stats.active_contests == 1
        assert stats.total_posts == 1
        assert stats.total_submissions == 2
        assert stats.pending_verifications == 1
        assert stats.estimated_revenue == 2 * REVENUE_PER_ACCOUNT

    def test_figures_grow_with_activity(self, db, make_meal):
        """Adding an account or a meal never lowers any figure."""
        db.directory.register("a@x.com")
        before = db.aggregator.snapshot()

        db.logs.append_meal(make_meal(BREAKFAST))
        db.directory.register("b@x.com")
        after = db.aggregator.snapshot()

        assert after.user_count > before.user_count
        assert after.total_meals_logged > before.total_meals_logged
        assert after.estimated_storage_bytes > before.estimated_storage_bytes
        assert after.estimated_revenue >= before.estimated_revenue

    def test_storage_ignores_foreign_keys(self, db, store):
        store.set("other_app_blob", "x" * 1000)
        assert db.aggregator.storage_footprint() == 0

    def test_corrupt_log_bucket_skipped(self, db, store, make_meal):
        db.directory.register("a@x.com")
        db.logs.append_meal(make_meal(BREAKFAST))
        store.set(db.keys.logs("user_broken"), "[1, 2")

        assert db.aggregator.meal_count() == 1


class TestRequireAdmin:
    """Tests for FitnessDatabase.require_admin."""

    def test_logged_out(self, db):
        with pytest.raises(NoActiveSession):
            db.require_admin()

    def test_regular_user(self, db):
        db.directory.register("a@x.com", "pw1")
        with pytest.raises(PermissionDenied):
            db.require_admin()

    def test_admin(self, db):
        db.directory.register(ADMIN_EMAIL, ADMIN_PASSWORD)
        account = db.directory.login(ADMIN_EMAIL, ADMIN_PASSWORD)

        assert db.require_admin().id == account.id


class TestPurgeAccount:
    """Tests for FitnessDatabase.purge_account."""

    def test_cascades_by_account_id(self, db, store, make_meal):
        """Purging removes the account and everything keyed by its id."""
        keep = db.directory.register("keep@x.com")
        db.posts.create(CommunityPost(id=1, user="Keep", author_id=keep.id))
        gone = db.directory.register("gone@x.com")
        db.logs.append_meal(make_meal(BREAKFAST))
        db.posts.create(CommunityPost(id=2, user="Gone", author_id=gone.id))
        db.submissions.create(ContestSubmission(id="s1", contest_id=1, account_id=gone.id))

        db.purge_account(gone.id)

        assert db.directory.get_account(gone.id) is None
        assert store.get(db.keys.logs(gone.id)) is None
        assert [p.id for p in db.posts.list()] == [1]
        assert db.submissions.list() == []
        assert db.session.current_id() is None
        assert db.directory.get_account(keep.id) is not None

    def test_keeps_other_session(self, db):
        gone = db.directory.register("gone@x.com")
        other = db.directory.register("other@x.com")

        db.purge_account(gone.id)

        assert db.session.current_id() == other.id
