"""Platform Aggregator - Read-only rollups for the admin console.

Reads are not isolated from each other: a snapshot taken while another
caller writes may mix old and new values.
"""

import logging

from ..core.codec import decode_map
from ..core.errors import MalformedStoredValue
from ..core.models import DailyLog, PlatformStats
from ..core.stats import build_platform_stats
from .directory import DirectoryStore
from .global_collections import ContestStore, PostStore, SubmissionStore
from .kv_store import KeyValueStore, StoreKeys


logger = logging.getLogger(__name__)


class PlatformAggregator:
    def __init__(
        self,
        store: KeyValueStore,
        keys: StoreKeys,
        directory: DirectoryStore,
        contests: ContestStore,
        posts: PostStore,
        submissions: SubmissionStore,
    ) -> None:
        self._store = store
        self._keys = keys
        self._directory = directory
        self._contests = contests
        self._posts = posts
        self._submissions = submissions

    def storage_footprint(self) -> int:
        """Estimated bytes used: total length of every value in the namespace."""
        total = 0
        for key in self._store.keys():
            if not self._keys.owns(key):
                continue
            value = self._store.get(key)
            if value is not None:
                total += len(key) + len(value)
        return total

    def meal_count(self) -> int:
        """Meals logged across every log bucket in the namespace."""
        count = 0
        for key in self._store.keys():
            if not key.startswith(self._keys.logs_prefix):
                continue
            text = self._store.get(key)
            if text is None:
                continue
            try:
                logs = decode_map(key, text, DailyLog)
            except MalformedStoredValue as e:
                logger.warning("Skipping corrupt log bucket: %s", e.message)
                continue
            count += sum(len(log.meals) for log in logs.values())
        return count

    def snapshot(self) -> PlatformStats:
        """Current platform figures."""
        return build_platform_stats(
            account_count=len(self._directory.list_accounts()),
            meal_count=self.meal_count(),
            contest_count=len(self._contests.list()),
            post_count=len(self._posts.list()),
            submissions=self._submissions.list(),
            storage_bytes=self.storage_footprint(),
        )
