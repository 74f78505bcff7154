"""Unit tests for app.core.config validation and app.core.security helpers."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import ValidationError

from app.core.config import Settings, settings
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestSettingsValidation(unittest.TestCase):
    """Settings reject invalid values at load time."""

    def test_defaults_are_valid(self) -> None:
        settings = Settings(_env_file=None)
        self.assertEqual(settings.API_V1_PREFIX, "/api/v1")
        self.assertEqual(settings.BULK_KYC_MAX_IDS, 500)

    def test_rejects_non_postgres_url(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="mysql://localhost/directory")

    def test_log_level_normalized(self) -> None:
        self.assertEqual(Settings(_env_file=None, LOG_LEVEL=" debug ").LOG_LEVEL, "DEBUG")

    def test_rejects_unknown_log_level(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="chatty")

    def test_bulk_limit_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, BULK_KYC_MAX_IDS=0)
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, BULK_KYC_MAX_IDS=501)

    def test_rejects_blank_jwt_secret(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, JWT_SECRET="   ")


class TestPasswords(unittest.TestCase):
    """bcrypt hashing round trip."""

    def test_hash_and_verify(self) -> None:
        hashed = hash_password("correct horse battery")
        self.assertNotEqual(hashed, "correct horse battery")
        self.assertTrue(verify_password("correct horse battery", hashed))
        self.assertFalse(verify_password("wrong password", hashed))

    def test_missing_hash_never_verifies(self) -> None:
        self.assertFalse(verify_password("anything-at-all", None))
        self.assertFalse(verify_password("anything-at-all", "not-a-bcrypt-hash"))


class TestTokens(unittest.TestCase):
    """JWT tokens carry the account id and role."""

    def test_token_payload(self) -> None:
        token = create_access_token(account_id="abc123", role="admin")
        payload = decode_access_token(token)
        self.assertEqual(payload["sub"], "abc123")
        self.assertEqual(payload["role"], "admin")
        self.assertIn("exp", payload)

    def test_tampered_token_rejected(self) -> None:
        token = create_access_token(account_id="abc123", role="user")
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(token + "x")

    def test_token_without_role_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "abc123", "exp": now + timedelta(minutes=5), "iat": now},
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(jwt.MissingRequiredClaimError):
            decode_access_token(token)


if __name__ == "__main__":
    unittest.main()
