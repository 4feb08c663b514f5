"""Tests for the global collection stores against an in-memory backend."""

import json

import pytest

from evolvefit.core.models import (
    CommunityPost,
    Contest,
    ContestSubmission,
    SubmissionStatus,
    TrainingContext,
)


class TestContests:
    """Tests for the uniform collection shape, via contests."""

    def test_create_prepends(self, db):
        """New records appear once, at the head."""
        db.contests.create(Contest(id=1, title="Plank Month"))
        db.contests.create(Contest(id=2, title="10k Steps"))

        contests = db.contests.list()

        assert [c.id for c in contests] == [2, 1]
        assert sum(1 for c in contests if c.id == 2) == 1

    def test_remove_returns_remaining(self, db):
        db.contests.create(Contest(id=1, title="Plank Month"))
        db.contests.create(Contest(id=2, title="10k Steps"))

        remaining = db.contests.remove(1)

        assert [c.id for c in remaining] == [2]
        assert all(c.id != 1 for c in db.contests.list())

    def test_remove_matches_ids_as_strings(self, db):
        """A path parameter "1" removes the record stored with id 1."""
        db.contests.create(Contest(id=1, title="Plank Month"))
        assert db.contests.remove("1") == []

    def test_remove_unknown_leaves_store_untouched(self, db, store):
        db.contests.create(Contest(id=1, title="Plank Month"))
        before = store.get(db.keys.contests)

        assert len(db.contests.remove(99)) == 1
        assert store.get(db.keys.contests) == before

    def test_update_replaces_in_place(self, db):
        db.contests.create(Contest(id=1, title="Plank Month"))
        db.contests.create(Contest(id=2, title="10k Steps"))

        assert db.contests.update(Contest(id=1, title="Plank Month II", days_left=3)) is True

        contests = db.contests.list()
        assert [c.id for c in contests] == [2, 1]
        assert contests[1].title == "Plank Month II"

    def test_update_unknown(self, db):
        assert db.contests.update(Contest(id=5, title="Ghost")) is False
        assert db.contests.list() == []

    def test_corrupt_collection_reads_empty(self, db, store):
        store.set(db.keys.contests, "not json")
        assert db.contests.list() == []


class TestSubmissions:
    """Tests for SubmissionStore."""

    def test_filter_by_contest(self, db):
        db.submissions.create(ContestSubmission(id="s1", contest_id=1))
        db.submissions.create(ContestSubmission(id="s2", contest_id=2))
        db.submissions.create(ContestSubmission(id="s3", contest_id=1))

        assert [s.id for s in db.submissions.list(contest_id=1)] == ["s3", "s1"]
        assert [s.id for s in db.submissions.list(contest_id="2")] == ["s2"]
        assert len(db.submissions.list()) == 3

    def test_update_status(self, db):
        db.submissions.create(ContestSubmission(id="s1", contest_id=1))

        updated = db.submissions.update_status("s1", SubmissionStatus.APPROVED)

        assert updated.status == SubmissionStatus.APPROVED
        assert db.submissions.get("s1").status == SubmissionStatus.APPROVED

    def test_update_status_unknown(self, db):
        assert db.submissions.update_status("missing", SubmissionStatus.REJECTED) is None

    def test_remove_all_by_account(self, db):
        db.submissions.create(ContestSubmission(id="s1", contest_id=1, account_id="user_a"))
        db.submissions.create(ContestSubmission(id="s2", contest_id=1, account_id="user_b"))

        assert [s.id for s in db.submissions.remove_all_by_account("user_a")] == ["s2"]


class TestPosts:
    """Tests for PostStore."""

    def test_ban_removes_by_display_name(self, db):
        """Moderation removes every post whose username matches."""
        db.posts.create(CommunityPost(id=1, user="spammer", caption="buy now"))
        db.posts.create(CommunityPost(id=2, user="Asha", caption="PR!"))
        db.posts.create(CommunityPost(id=3, user="spammer", caption="again"))

        remaining = db.posts.remove_all_by_user("spammer")

        assert [p.id for p in remaining] == [2]
        assert [p.id for p in db.posts.list()] == [2]

    def test_remove_all_by_author(self, db):
        db.posts.create(CommunityPost(id=1, user="Asha", author_id="user_a"))
        db.posts.create(CommunityPost(id=2, user="Asha", author_id="user_b"))

        assert [p.id for p in db.posts.remove_all_by_author("user_a")] == [2]

    def test_default_ids_distinct_under_rapid_creation(self, db):
        """Posts created back to back get distinct ids, so removing one keeps the rest."""
        posts = [db.posts.create(CommunityPost(user=f"u{i}")) for i in range(20)]

        assert len({p.id for p in posts}) == 20

        remaining = db.posts.remove(posts[-1].id)

        assert len(remaining) == 19
        assert len(db.posts.list()) == 19

    def test_create_rejects_existing_id(self, db):
        db.posts.create(CommunityPost(id=1, user="Asha"))

        with pytest.raises(ValueError):
            db.posts.create(CommunityPost(id="1", user="Ravi"))
        assert [p.user for p in db.posts.list()] == ["Asha"]

    def test_update_likes(self, db):
        post = db.posts.create(CommunityPost(id=1, user="Asha", caption="PR!"))

        db.posts.update(post.model_copy(update={"likes": 5, "is_liked": True}))

        assert db.posts.get(1).likes == 5

    def test_stored_as_json_array(self, db, store):
        db.posts.create(CommunityPost(id=1, user="Asha"))
        assert isinstance(json.loads(store.get(db.keys.posts)), list)


class TestTrainingContext:
    """Tests for TrainingPreferenceStore."""

    def test_unset(self, db):
        assert db.training.get() is None

    def test_save_overwrites(self, db):
        db.training.save(TrainingContext(split="Push", environment="Gym"))
        db.training.save(TrainingContext(split="Legs", environment="Home"))

        context = db.training.get()
        assert context.split.value == "Legs"
        assert context.environment.value == "Home"

    def test_corrupt_reads_unset(self, db, store):
        store.set(db.keys.training_context, '{"split": "Arms"}')
        assert db.training.get() is None
