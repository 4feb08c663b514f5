"""Configuration - Environment-driven settings for the service."""

import os
from dataclasses import dataclass, field
from datetime import tzinfo
from zoneinfo import ZoneInfo


@dataclass
class AppConfig:
    """Runtime configuration.

    Attributes:
        backend: Backing store, "memory" or "firestore"
        firestore_project: GCP project ID (None for default)
        firestore_database: Firestore database name (None for default database)
        firestore_collection: Collection holding one document per top-level key
        key_prefix: Namespace prepended to every top-level key
        timezone: IANA zone used for date keys (None for the host zone)
        admin_email: Email granted admin rights at login (None disables admin)
        admin_password_hash: PBKDF2 hash the admin password must verify against
        host: Bind address for the HTTP server
        port: Bind port for the HTTP server
        cors_origins: Origins allowed to call the HTTP API
    """

    backend: str = "memory"
    firestore_project: str | None = None
    firestore_database: str | None = None
    firestore_collection: str = "evolvefit_kv"
    key_prefix: str = "evolvefit_"
    timezone: str | None = None
    admin_email: str | None = None
    admin_password_hash: str | None = None
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def tz(self) -> tzinfo | None:
        """Local zone for date keys, or None for the host zone."""
        return ZoneInfo(self.timezone) if self.timezone else None


def load_config() -> AppConfig:
    """Build configuration from environment variables."""
    origins = os.environ.get("CORS_ORIGINS", "http://localhost:3000")
    return AppConfig(
        backend=os.environ.get("EVOLVEFIT_BACKEND", "memory"),
        firestore_project=os.environ.get("FIRESTORE_PROJECT") or None,
        firestore_database=os.environ.get("FIRESTORE_DATABASE") or None,
        firestore_collection=os.environ.get("FIRESTORE_COLLECTION", "evolvefit_kv"),
        key_prefix=os.environ.get("EVOLVEFIT_KEY_PREFIX", "evolvefit_"),
        timezone=os.environ.get("EVOLVEFIT_TIMEZONE") or None,
        admin_email=os.environ.get("EVOLVEFIT_ADMIN_EMAIL") or None,
        admin_password_hash=os.environ.get("EVOLVEFIT_ADMIN_PASSWORD_HASH") or None,
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", 8080)),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
