"""Fitness Database - One entry point wiring every store to one backing store."""

import logging
from datetime import datetime
from typing import Callable

from ..config import AppConfig
from ..core.errors import PermissionDenied
from ..core.models import AccountRecord, utc_now
from .admin import PlatformAggregator
from .daily_logs import DailyLogStore
from .directory import DirectoryStore, SessionStore
from .global_collections import ContestStore, PostStore, SubmissionStore
from .kv_store import (
    FirestoreConfig,
    FirestoreKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StoreKeys,
)
from .preferences import TrainingPreferenceStore


logger = logging.getLogger(__name__)


def create_store(config: AppConfig) -> KeyValueStore:
    """Backing store selected by configuration."""
    if config.backend == "firestore":
        return FirestoreKeyValueStore(
            FirestoreConfig(
                project_id=config.firestore_project,
                database=config.firestore_database,
                collection=config.firestore_collection,
            )
        )
    if config.backend != "memory":
        raise ValueError(f"Unknown backend: {config.backend}")
    return MemoryKeyValueStore()


class FitnessDatabase:
    """Every store of the application over a shared backing store.

    Attributes:
        session: Active session pointer
        directory: Accounts and profiles
        logs: Daily nutrition logs
        contests: Global contest collection
        submissions: Global contest submission collection
        posts: Global community post collection
        training: Muscle-training preference
        aggregator: Admin console rollups
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: AppConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config or AppConfig()
        self.store = store
        self.keys = StoreKeys(self.config.key_prefix)

        self.session = SessionStore(store, self.keys)
        self.directory = DirectoryStore(store, self.keys, self.session, self.config, clock)
        self.logs = DailyLogStore(store, self.keys, self.directory, self.config.tz, clock)
        self.contests = ContestStore(store, self.keys.contests)
        self.submissions = SubmissionStore(store, self.keys.submissions)
        self.posts = PostStore(store, self.keys.posts)
        self.training = TrainingPreferenceStore(store, self.keys)
        self.aggregator = PlatformAggregator(
            store, self.keys, self.directory, self.contests, self.posts, self.submissions
        )

    def require_admin(self) -> AccountRecord:
        """The signed-in account, if it is an admin.

        Raises:
            NoActiveSession: If nobody is signed in
            PermissionDenied: If the account is not an admin
        """
        account = self.directory.require_account()
        if not account.is_admin:
            raise PermissionDenied()
        return account

    def purge_account(self, account_id: str) -> None:
        """Delete an account and everything keyed by its id.

        Removes the directory entry, the log bucket, posts and submissions
        authored by the account, and the session if it pointed at it.
        Posts identified only by display name are not touched.
        """
        self.directory.delete_account(account_id)
        self.logs.delete_all(account_id)
        self.posts.remove_all_by_author(account_id)
        self.submissions.remove_all_by_account(account_id)
        if self.session.current_id() == account_id:
            self.session.clear()
        logger.info("Purged account: %s", account_id[:8])
