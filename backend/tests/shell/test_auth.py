"""Unit tests for auth module - pure functions only."""

from evolvefit.config import AppConfig
from evolvefit.shell.auth import (
    ACCOUNT_ID_PREFIX,
    generate_account_id,
    hash_password,
    is_admin_login,
    normalize_email,
    verify_password,
)


class TestNormalizeEmail:
    """Tests for normalize_email."""

    def test_trims_and_lowercases(self):
        assert normalize_email("  A@X.Com ") == "a@x.com"


class TestGenerateAccountId:
    """Tests for generate_account_id."""

    def test_starts_with_prefix(self):
        assert generate_account_id().startswith(ACCOUNT_ID_PREFIX)

    def test_unique_under_rapid_creation(self):
        """Ids created back to back in the same millisecond still differ."""
        ids = [generate_account_id() for _ in range(500)]
        assert len(set(ids)) == 500


class TestPasswordHashing:
    """Tests for hash_password and verify_password."""

    def test_roundtrip(self):
        proof = hash_password("pw1", iterations=1000)
        assert verify_password("pw1", proof) is True

    def test_wrong_password(self):
        proof = hash_password("pw1", iterations=1000)
        assert verify_password("wrong", proof) is False

    def test_salted(self):
        """Same password hashes differently each time."""
        assert hash_password("pw1", iterations=1000) != hash_password("pw1", iterations=1000)

    def test_not_reversible_encoding(self):
        """The proof does not contain the password in any plain form."""
        proof = hash_password("pw1", iterations=1000)
        assert "pw1" not in proof
        assert proof.startswith("pbkdf2_sha256$1000$")

    def test_missing_or_garbage_proof(self):
        assert verify_password("pw1", None) is False
        assert verify_password("pw1", "") is False
        assert verify_password("pw1", "cHcx") is False
        assert verify_password("pw1", "pbkdf2_sha256$abc$salt$digest") is False


class TestIsAdminLogin:
    """Tests for is_admin_login."""

    def config(self):
        return AppConfig(admin_email="Boss@EvolveFit.app", admin_password_hash=hash_password("s3cret", iterations=1000))

    def test_matching_credentials(self):
        assert is_admin_login(" boss@evolvefit.app", "s3cret", self.config()) is True

    def test_wrong_password(self):
        assert is_admin_login("boss@evolvefit.app", "nope", self.config()) is False

    def test_other_email(self):
        assert is_admin_login("user@evolvefit.app", "s3cret", self.config()) is False

    def test_no_password(self):
        assert is_admin_login("boss@evolvefit.app", None, self.config()) is False

    def test_admin_disabled_when_unconfigured(self):
        assert is_admin_login("boss@evolvefit.app", "s3cret", AppConfig()) is False
