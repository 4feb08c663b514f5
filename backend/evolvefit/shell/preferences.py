"""Training Preferences - The muscle-training context (split + environment)."""

import logging

from ..core.codec import decode_entity, encode_entity
from ..core.errors import MalformedStoredValue
from ..core.models import TrainingContext
from .kv_store import KeyValueStore, StoreKeys, write_value


logger = logging.getLogger(__name__)


class TrainingPreferenceStore:
    def __init__(self, store: KeyValueStore, keys: StoreKeys) -> None:
        self._store = store
        self._key = keys.training_context

    def get(self) -> TrainingContext | None:
        """The saved context, or None if unset or unreadable."""
        text = self._store.get(self._key)
        if text is None:
            return None
        try:
            return decode_entity(self._key, text, TrainingContext)
        except MalformedStoredValue as e:
            logger.warning("Recovering from corrupt value: %s", e.message)
            return None

    def save(self, context: TrainingContext) -> TrainingContext:
        write_value(self._store, self._key, encode_entity(context))
        return context
