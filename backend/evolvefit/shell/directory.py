"""Directory & Session - Accounts, sign-in and the active session pointer.

The whole directory is one serialized map of account id to AccountRecord
under a single top-level key. The session is a bare account id under another
key; its absence means logged out.
"""

import logging
from datetime import datetime
from typing import Callable

from ..config import AppConfig
from ..core.errors import AccountNotFound, DuplicateEmail, InvalidCredential, NoActiveSession
from ..core.models import (
    AccountRecord,
    AccountSummary,
    AuthProvider,
    FitnessProfile,
    utc_now,
)
from ..core.targets import with_targets
from .auth import (
    FEDERATED_ID_PREFIX,
    generate_account_id,
    hash_password,
    is_admin_login,
    normalize_email,
    verify_password,
)
from .kv_store import KeyValueStore, StoreKeys, delete_value, read_map, write_map, write_value


logger = logging.getLogger(__name__)


class SessionStore:
    """Pointer to the currently authenticated account."""

    def __init__(self, store: KeyValueStore, keys: StoreKeys) -> None:
        self._store = store
        self._keys = keys

    def current_id(self) -> str | None:
        """Id of the signed-in account, or None when logged out."""
        return self._store.get(self._keys.session) or None

    def start(self, account_id: str) -> None:
        write_value(self._store, self._keys.session, account_id)

    def clear(self) -> None:
        if self._store.get(self._keys.session) is not None:
            delete_value(self._store, self._keys.session)


class DirectoryStore:
    """Client for account registration, sign-in and profile storage.

    Every operation reads the full directory, changes it in memory and writes
    it back whole.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: StoreKeys,
        session: SessionStore,
        config: AppConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._keys = keys
        self._session = session
        self._config = config
        self._clock = clock

    def _load(self) -> dict[str, AccountRecord]:
        return read_map(self._store, self._keys.users, AccountRecord)

    def _save(self, accounts: dict[str, AccountRecord]) -> None:
        write_map(self._store, self._keys.users, accounts, AccountRecord)

    @staticmethod
    def _find_by_email(accounts: dict[str, AccountRecord], email: str) -> AccountRecord | None:
        return next((a for a in accounts.values() if a.email == email), None)

    # ==================== Authentication ====================

    def register(
        self,
        email: str,
        password: str | None = None,
        provider: AuthProvider = AuthProvider.PASSWORD,
    ) -> AccountRecord:
        """Create an account and sign it in.

        Args:
            email: Email address, normalized before storage
            password: Password for password accounts
            provider: How the account authenticates

        Returns:
            The new AccountRecord

        Raises:
            ValueError: If the email is not plausibly an address
            DuplicateEmail: If an account already uses this email
        """
        normalized = normalize_email(email)
        if not normalized or "@" not in normalized:
            raise ValueError("Valid email is required")

        accounts = self._load()
        if self._find_by_email(accounts, normalized) is not None:
            raise DuplicateEmail()

        now = self._clock()
        account = AccountRecord(
            id=generate_account_id(),
            email=normalized,
            credential_proof=hash_password(password) if password else None,
            auth_provider=provider,
            created_at=now,
            last_login_at=now,
        )
        accounts[account.id] = account
        self._save(accounts)
        self._session.start(account.id)

        logger.info("Registered account: %s", account.id[:8])
        return account

    def login(self, email: str, password: str | None = None) -> AccountRecord:
        """Sign in to an existing account.

        The admin flag is recomputed from the submitted credentials every time.

        Raises:
            AccountNotFound: If no account uses this email
            InvalidCredential: If a supplied password does not match
        """
        normalized = normalize_email(email)
        accounts = self._load()
        account = self._find_by_email(accounts, normalized)
        if account is None:
            raise AccountNotFound()

        if account.auth_provider == AuthProvider.PASSWORD and password:
            if not verify_password(password, account.credential_proof):
                logger.warning("Rejected password for account: %s", account.id[:8])
                raise InvalidCredential()

        account = account.model_copy(
            update={
                "last_login_at": self._clock(),
                "is_admin": is_admin_login(normalized, password, self._config),
            }
        )
        accounts[account.id] = account
        self._save(accounts)
        self._session.start(account.id)

        logger.info("Signed in account: %s (admin=%s)", account.id[:8], account.is_admin)
        return account

    def federated_sign_in(
        self, email: str, provider: AuthProvider = AuthProvider.FEDERATED_A
    ) -> AccountRecord:
        """Sign in through an external identity provider.

        Idempotent: an existing account is refreshed, otherwise a profile-less
        account is created.
        """
        if provider == AuthProvider.PASSWORD:
            raise ValueError("Federated sign-in needs a federated provider")
        normalized = normalize_email(email)
        if not normalized or "@" not in normalized:
            raise ValueError("Valid email is required")

        accounts = self._load()
        now = self._clock()
        account = self._find_by_email(accounts, normalized)
        if account is not None:
            account = account.model_copy(update={"last_login_at": now})
        else:
            account = AccountRecord(
                id=generate_account_id(FEDERATED_ID_PREFIX),
                email=normalized,
                auth_provider=provider,
                created_at=now,
                last_login_at=now,
            )
            logger.info("Created federated account: %s", account.id[:8])

        accounts[account.id] = account
        self._save(accounts)
        self._session.start(account.id)
        return account

    def logout(self) -> None:
        """Clear the session pointer. The directory is untouched."""
        self._session.clear()

    def current_account(self) -> AccountRecord | None:
        """The signed-in account, or None."""
        account_id = self._session.current_id()
        if account_id is None:
            return None
        return self._load().get(account_id)

    def require_account(self) -> AccountRecord:
        """The signed-in account.

        Raises:
            NoActiveSession: If nobody is signed in
        """
        account = self.current_account()
        if account is None:
            raise NoActiveSession()
        return account

    # ==================== Profile ====================

    def save_profile(self, profile: FitnessProfile) -> FitnessProfile:
        """Replace the signed-in account's profile.

        Targets are recomputed from the profile's biometrics on every save.

        Returns:
            The stored profile as read_profile would return it

        Raises:
            NoActiveSession: If nobody is signed in
        """
        account = self.require_account()
        accounts = self._load()
        stored = with_targets(profile).model_copy(update={"is_admin": False})
        accounts[account.id] = accounts[account.id].model_copy(update={"profile": stored})
        self._save(accounts)

        logger.info("Saved profile for account: %s", account.id[:8])
        return self._profile_view(accounts[account.id])

    def read_profile(self) -> FitnessProfile | None:
        """The signed-in account's profile, with the admin flag merged in."""
        account = self.current_account()
        if account is None:
            return None
        return self._profile_view(account)

    @staticmethod
    def _profile_view(account: AccountRecord) -> FitnessProfile | None:
        if account.profile is None:
            return None
        if account.is_admin:
            return account.profile.model_copy(update={"is_admin": True})
        return account.profile

    # ==================== Administration ====================

    def get_account(self, account_id: str) -> AccountRecord | None:
        return self._load().get(account_id)

    def list_accounts(self) -> list[AccountRecord]:
        """Every account, most recent login first."""
        return sorted(self._load().values(), key=lambda a: a.last_login_at, reverse=True)

    def account_summaries(self) -> list[AccountSummary]:
        """Rows for the admin user table."""
        return [
            AccountSummary(
                id=a.id,
                name=a.profile.name if a.profile else "Incomplete Profile",
                email=a.email,
                joined=a.created_at.date(),
                status="Active" if a.profile else "Pending",
                is_admin=a.is_admin,
            )
            for a in self.list_accounts()
        ]

    def delete_account(self, account_id: str) -> list[AccountSummary]:
        """Remove an account from the directory only.

        Logs and authored records are left alone; use the database facade's
        purge for a cascading delete.

        Returns:
            The refreshed admin user table
        """
        accounts = self._load()
        if accounts.pop(account_id, None) is not None:
            self._save(accounts)
            logger.info("Deleted account: %s", account_id[:8])
        else:
            logger.warning("Account not found: %s", account_id[:8])
        return self.account_summaries()
