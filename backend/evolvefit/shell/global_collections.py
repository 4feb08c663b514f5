"""Global Collections - Contests, contest submissions and community posts.

Each collection is one JSON array under its own top-level key, newest first.
Updates and deletes rewrite the whole array. Ids are compared as strings so
numeric and string ids written by different clients still match.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from ..core.models import (
    CommunityPost,
    Contest,
    ContestSubmission,
    RecordId,
    SubmissionStatus,
)
from .kv_store import KeyValueStore, read_list, write_list


logger = logging.getLogger(__name__)

R = TypeVar("R", Contest, ContestSubmission, CommunityPost)


def same_id(a: RecordId, b: RecordId) -> bool:
    return str(a) == str(b)


class GlobalCollection(Generic[R]):
    """A newest-first array of records under one key."""

    model_type: type[R]

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._key = key

    def _save(self, records: list[R]) -> None:
        write_list(self._store, self._key, records, self.model_type)

    def list(self) -> list[R]:
        """All records, newest first."""
        return read_list(self._store, self._key, self.model_type)

    def get(self, record_id: RecordId) -> R | None:
        return next((r for r in self.list() if same_id(r.id, record_id)), None)

    def create(self, record: R) -> R:
        """Prepend a record.

        Raises:
            ValueError: If a record with the same id already exists
        """
        records = self.list()
        if any(same_id(r.id, record.id) for r in records):
            raise ValueError(f"{self.model_type.__name__} {record.id} already exists")
        self._save([record, *records])
        logger.info("Created %s: %s", self.model_type.__name__, record.id)
        return record

    def update(self, record: R) -> bool:
        """Replace the record with the same id.

        Returns:
            True if a record was replaced
        """
        records = self.list()
        found = False
        updated: list[R] = []
        for existing in records:
            if same_id(existing.id, record.id):
                updated.append(record)
                found = True
            else:
                updated.append(existing)
        if not found:
            logger.warning("%s not found: %s", self.model_type.__name__, record.id)
            return False
        self._save(updated)
        return True

    def remove(self, record_id: RecordId) -> list[R]:
        """Delete a record by id.

        Returns:
            The remaining records, so callers can resync in one round trip
        """
        records = self.list()
        remaining = [r for r in records if not same_id(r.id, record_id)]
        if len(remaining) != len(records):
            self._save(remaining)
            logger.info("Removed %s: %s", self.model_type.__name__, record_id)
        return remaining


class ContestStore(GlobalCollection[Contest]):
    model_type = Contest


class SubmissionStore(GlobalCollection[ContestSubmission]):
    model_type = ContestSubmission

    def list(self, contest_id: RecordId | None = None) -> list[ContestSubmission]:
        """Submissions, optionally only those for one contest."""
        submissions = super().list()
        if contest_id is None:
            return submissions
        return [s for s in submissions if same_id(s.contest_id, contest_id)]

    def update_status(self, submission_id: RecordId, status: SubmissionStatus) -> ContestSubmission | None:
        """Set the review status of a submission.

        Returns:
            The updated submission, or None if it does not exist
        """
        submission = self.get(submission_id)
        if submission is None:
            logger.warning("Submission not found: %s", submission_id)
            return None
        updated = submission.model_copy(update={"status": status})
        self.update(updated)
        return updated

    def remove_all_by_account(self, account_id: str) -> list[ContestSubmission]:
        """Delete every submission made by an account."""
        submissions = self.list()
        remaining = [s for s in submissions if s.account_id != account_id]
        if len(remaining) != len(submissions):
            self._save(remaining)
        return remaining


class PostStore(GlobalCollection[CommunityPost]):
    model_type = CommunityPost

    def remove_all_by_user(self, username: str) -> list[CommunityPost]:
        """Moderation ban: delete every post whose display name matches.

        Returns:
            The remaining posts
        """
        posts = self.list()
        remaining = [p for p in posts if p.user != username]
        if len(remaining) != len(posts):
            self._save(remaining)
            logger.info("Banned %s: removed %d post(s)", username, len(posts) - len(remaining))
        return remaining

    def remove_all_by_author(self, account_id: str) -> list[CommunityPost]:
        """Delete every post authored by an account id."""
        posts = self.list()
        remaining = [p for p in posts if p.author_id != account_id]
        if len(remaining) != len(posts):
            self._save(remaining)
            logger.info("Removed %d post(s) by %s", len(posts) - len(remaining), account_id[:8])
        return remaining
