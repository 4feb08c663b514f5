"""Key-Value Store - The backing store every top-level value lives in.

This module handles all raw storage I/O. Stores above it read and write whole
serialized values by key; there are no partial updates and no transactions.

Read policy: a missing or corrupt value is recovered as an empty default and
logged. Write policy: any backend failure becomes PersistenceFailure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar

from google.cloud import firestore
from pydantic import BaseModel

from ..core.codec import decode_list, decode_map, encode_list, encode_map
from ..core.errors import MalformedStoredValue, PersistenceFailure


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class KeyValueStore(Protocol):
    """Synchronous string-keyed, string-valued store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    """Process-local store. Used for tests and ephemeral runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Collection holding one document per top-level key
    """

    project_id: str | None = None
    database: str | None = None
    collection: str = "evolvefit_kv"


class FirestoreKeyValueStore:
    """Key-value store persisted to Firestore.

    Document structure:
        {collection}/{key}: { value: "<serialized JSON>" }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _ref(self, key: str) -> firestore.DocumentReference:
        """Get reference to the document backing a key."""
        return self.client.collection(self.config.collection).document(key)

    def get(self, key: str) -> str | None:
        logger.debug("Fetching key: %s", key)
        try:
            doc = self._ref(key).get()
            if not doc.exists:
                return None
            return (doc.to_dict() or {}).get("value")
        except Exception as e:
            logger.error("Failed to fetch %s: %s", key, str(e))
            return None

    def set(self, key: str, value: str) -> None:
        try:
            self._ref(key).set({"value": value})
        except Exception as e:
            logger.error("Failed to save %s: %s", key, str(e))
            raise PersistenceFailure(f"Failed to save '{key}'") from e

    def delete(self, key: str) -> None:
        try:
            self._ref(key).delete()
        except Exception as e:
            logger.error("Failed to delete %s: %s", key, str(e))
            raise PersistenceFailure(f"Failed to delete '{key}'") from e

    def keys(self) -> list[str]:
        try:
            return [ref.id for ref in self.client.collection(self.config.collection).list_documents()]
        except Exception as e:
            logger.error("Failed to list keys: %s", str(e))
            return []


# ==================== Whole-value helpers ====================


def _read(store: KeyValueStore, key: str, decode: Callable[[str], Any], default: Any) -> Any:
    text = store.get(key)
    if text is None:
        return default
    try:
        return decode(text)
    except MalformedStoredValue as e:
        logger.warning("Recovering from corrupt value: %s", e.message)
        return default


def read_map(store: KeyValueStore, key: str, model_type: type[M]) -> dict[str, M]:
    """Read a map value, or an empty map if absent or corrupt."""
    return _read(store, key, lambda text: decode_map(key, text, model_type), {})


def read_list(store: KeyValueStore, key: str, model_type: type[M]) -> list[M]:
    """Read a list value, or an empty list if absent or corrupt."""
    return _read(store, key, lambda text: decode_list(key, text, model_type), [])


def write_value(store: KeyValueStore, key: str, value: str) -> None:
    """Write a serialized value, surfacing any failure as PersistenceFailure."""
    try:
        store.set(key, value)
    except PersistenceFailure:
        raise
    except Exception as e:
        logger.error("Failed to save %s: %s", key, str(e))
        raise PersistenceFailure(f"Failed to save '{key}'") from e


def write_map(store: KeyValueStore, key: str, entities: dict[str, M], model_type: type[M]) -> None:
    """Serialize and write a whole map value."""
    write_value(store, key, encode_map(entities, model_type))


def write_list(store: KeyValueStore, key: str, entities: list[M], model_type: type[M]) -> None:
    """Serialize and write a whole list value."""
    write_value(store, key, encode_list(entities, model_type))


def delete_value(store: KeyValueStore, key: str) -> None:
    """Delete a value, surfacing any failure as PersistenceFailure."""
    try:
        store.delete(key)
    except PersistenceFailure:
        raise
    except Exception as e:
        logger.error("Failed to delete %s: %s", key, str(e))
        raise PersistenceFailure(f"Failed to delete '{key}'") from e


class StoreKeys:
    """Top-level key layout under one namespace prefix."""

    def __init__(self, prefix: str = "evolvefit_") -> None:
        self.prefix = prefix

    @property
    def users(self) -> str:
        return f"{self.prefix}db_users"

    @property
    def session(self) -> str:
        return f"{self.prefix}db_session"

    @property
    def logs_prefix(self) -> str:
        return f"{self.prefix}db_logs_"

    def logs(self, user_id: str) -> str:
        return f"{self.logs_prefix}{user_id}"

    @property
    def contests(self) -> str:
        return f"{self.prefix}global_contests"

    @property
    def posts(self) -> str:
        return f"{self.prefix}global_posts"

    @property
    def submissions(self) -> str:
        return f"{self.prefix}global_submissions"

    @property
    def training_context(self) -> str:
        return f"{self.prefix}musclebook_ctx"

    def owns(self, key: str) -> bool:
        """Whether a key belongs to this namespace."""
        return key.startswith(self.prefix)
