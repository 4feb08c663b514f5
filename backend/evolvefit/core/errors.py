"""Error Taxonomy - Stable error kinds for callers to branch on.

Every error raised by the core carries an ErrorKind so callers never have to
match on message text. Messages stay short enough to show to the user as-is.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable identifiers for every failure the core reports."""

    DUPLICATE_EMAIL = "duplicate_email"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INVALID_CREDENTIAL = "invalid_credential"
    NO_ACTIVE_SESSION = "no_active_session"
    PERMISSION_DENIED = "permission_denied"
    MALFORMED_STORED_VALUE = "malformed_stored_value"
    PERSISTENCE_FAILURE = "persistence_failure"


class EvolveFitError(Exception):
    """Base exception for all core errors."""

    kind: ErrorKind
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(EvolveFitError):
    """Raised when registering an email that already has an account."""

    kind = ErrorKind.DUPLICATE_EMAIL
    default_message = "This email is already in use."


class AccountNotFound(EvolveFitError):
    """Raised when no account matches the normalized email or id."""

    kind = ErrorKind.ACCOUNT_NOT_FOUND
    default_message = "No account found."


class InvalidCredential(EvolveFitError):
    """Raised when a password does not match the stored proof."""

    kind = ErrorKind.INVALID_CREDENTIAL
    default_message = "Incorrect password."


class NoActiveSession(EvolveFitError):
    """Raised by writes that need an authenticated user."""

    kind = ErrorKind.NO_ACTIVE_SESSION
    default_message = "No user logged in."


class PermissionDenied(EvolveFitError):
    """Raised when a non-admin session calls an administrative operation."""

    kind = ErrorKind.PERMISSION_DENIED
    default_message = "Administrator access required."


class MalformedStoredValue(EvolveFitError):
    """Raised by the codec when a stored value is not the expected JSON."""

    kind = ErrorKind.MALFORMED_STORED_VALUE
    default_message = "Stored value is corrupt."

    def __init__(self, key: str, detail: str | None = None) -> None:
        self.key = key
        message = f"Stored value under '{key}' is corrupt"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PersistenceFailure(EvolveFitError):
    """Raised when the backing store rejects a write."""

    kind = ErrorKind.PERSISTENCE_FAILURE
    default_message = "Failed to save data."
