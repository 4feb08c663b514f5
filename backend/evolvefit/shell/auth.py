"""Authentication - Credential hashing and the admin gate.

Passwords are stored as salted PBKDF2 hashes, never as plaintext or a
reversible encoding. Admin rights are granted only to the configured admin
email with a password that verifies against the configured admin hash.
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time

from ..config import AppConfig


logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "sha256"
PBKDF2_ITERATIONS = 200_000

ACCOUNT_ID_PREFIX = "user_"
FEDERATED_ID_PREFIX = "user_fed_"


def normalize_email(email: str) -> str:
    """Lower-case and trim an email for comparison and storage."""
    return email.strip().lower()


def generate_account_id(prefix: str = ACCOUNT_ID_PREFIX) -> str:
    """Generate a unique account id.

    Millisecond time plus a random suffix, so two accounts created in the
    same millisecond still get distinct ids.

    Returns:
        Account id in format: user_<millis>_<random>
    """
    return f"{prefix}{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password with a fresh random salt.

    Returns:
        Proof string in format: pbkdf2_sha256$<iterations>$<salt>$<digest>
    """
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac(PBKDF2_ALGORITHM, password.encode("utf-8"), salt, iterations)
    return f"pbkdf2_{PBKDF2_ALGORITHM}${iterations}${_b64encode(salt)}${_b64encode(digest)}"


def verify_password(password: str, proof: str | None) -> bool:
    """Check a password against a stored proof in constant time.

    Args:
        password: The submitted password
        proof: Stored proof from hash_password

    Returns:
        True if the password matches; False for a mismatch or unreadable proof
    """
    if not proof:
        return False
    try:
        scheme, iterations, salt, expected = proof.split("$", 3)
        if not scheme.startswith("pbkdf2_"):
            return False
        algorithm = scheme.split("_", 1)[1]
        actual = hashlib.pbkdf2_hmac(
            algorithm, password.encode("utf-8"), _b64decode(salt), int(iterations)
        )
    except ValueError:
        logger.warning("Unreadable credential proof")
        return False
    return hmac.compare_digest(actual, _b64decode(expected))


def is_admin_login(email: str, password: str | None, config: AppConfig) -> bool:
    """Whether a login attempt carries the configured admin credentials.

    Evaluated on every login, so revoking the configured admin takes effect
    at the next sign-in.
    """
    if not config.admin_email or not config.admin_password_hash or not password:
        return False
    if normalize_email(email) != normalize_email(config.admin_email):
        return False
    return verify_password(password, config.admin_password_hash)
