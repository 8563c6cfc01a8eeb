import json
import time
import unittest
from unittest.mock import MagicMock, patch

from lightberry.auth import (
    AdminAuthService,
    DemoCredentialProvider,
    PasswordResetError,
    StoreCredentialProvider,
    hash_password,
    verify_password,
)
from lightberry.db import SqlProjectStore
from lightberry.fallback import OperationOutcome
from lightberry.sessions import AdminSession, InMemorySessionStore, RedisSessionStore


class PasswordHashTests(unittest.TestCase):
    def test_hash_and_verify(self):
        encoded = hash_password("s3cret!", iterations=1000)
        self.assertTrue(encoded.startswith("pbkdf2_sha256$1000$"))
        self.assertTrue(verify_password("s3cret!", encoded))
        self.assertFalse(verify_password("wrong", encoded))
        self.assertFalse(verify_password("s3cret!", "garbage"))


class DemoAuthTests(unittest.TestCase):
    def setUp(self):
        self.sessions = InMemorySessionStore()
        self.auth = AdminAuthService(
            DemoCredentialProvider("admin@example.com", "admin123"),
            self.sessions,
            ttl_seconds=60,
        )

    def test_login_success_creates_session(self):
        result = self.auth.login("Admin@Example.com", "admin123")
        session = result.data
        self.assertIsNotNone(session)
        self.assertEqual(session.email, "admin@example.com")
        self.assertIn(session.token, self.sessions.sessions)

        lookup = self.auth.get_session(session.token)
        self.assertEqual(lookup.data.email, "admin@example.com")

    def test_login_failure(self):
        result = self.auth.login("admin@example.com", "nope")
        self.assertIsNone(result.data)
        self.assertEqual(result.error, "Invalid email or password")
        self.assertEqual(self.sessions.sessions, {})

    def test_logout_removes_session(self):
        token = self.auth.login("admin@example.com", "admin123").data.token
        self.auth.logout(token)
        self.assertIsNone(self.auth.get_session(token).data)

    def test_missing_token_is_logged_out(self):
        result = self.auth.get_session(None)
        self.assertIsNone(result.data)
        self.assertIsNone(result.error)

    def test_expired_session_is_dropped(self):
        expired = AdminSession(token="t", email="a", expires_at=time.time() - 1)
        self.sessions.save(expired)
        self.assertIsNone(self.auth.get_session("t").data)
        self.assertNotIn("t", self.sessions.sessions)

    def test_reset_password_not_available_in_demo_mode(self):
        session = self.auth.login("admin@example.com", "admin123").data
        with self.assertRaises(PasswordResetError):
            self.auth.reset_password(session, "newpass", "newpass")


class StoreAuthTests(unittest.TestCase):
    def setUp(self):
        self.store = SqlProjectStore("sqlite+pysqlite:///:memory:")
        self.store.save_admin_user("owner@lightberry.dev", hash_password("hunter22"))
        self.auth = AdminAuthService(
            StoreCredentialProvider(self.store), InMemorySessionStore()
        )

    def test_login_against_store(self):
        session = self.auth.login("owner@lightberry.dev", "hunter22").data
        self.assertIsNotNone(session)
        self.assertEqual(session.email, "owner@lightberry.dev")
        self.assertIsNone(self.auth.login("owner@lightberry.dev", "bad").data)

    def test_reset_password(self):
        session = self.auth.login("owner@lightberry.dev", "hunter22").data
        with self.assertRaisesRegex(PasswordResetError, "do not match"):
            self.auth.reset_password(session, "abcdef", "abcdeg")
        with self.assertRaisesRegex(PasswordResetError, "at least 6"):
            self.auth.reset_password(session, "abc", "abc")

        result = self.auth.reset_password(session, "newpass1", "newpass1")
        self.assertTrue(result.data)
        self.assertIsNotNone(self.auth.login("owner@lightberry.dev", "newpass1").data)

    def test_unconfigured_store(self):
        auth = AdminAuthService(StoreCredentialProvider(None), InMemorySessionStore())
        result = auth.login("owner@lightberry.dev", "hunter22")
        self.assertIsNone(result.data)
        self.assertEqual(result.outcome, OperationOutcome.NOT_CONFIGURED)
        self.assertEqual(result.error, "Store not configured")


class RedisSessionStoreTests(unittest.TestCase):
    @patch("lightberry.sessions.redis.Redis.from_url")
    def test_save_and_get(self, mock_from_url):
        client = MagicMock()
        mock_from_url.return_value = client
        store = RedisSessionStore(url="redis://localhost:6379/0", prefix="lb:")

        session = AdminSession(token="abc", email="a@b.c", expires_at=time.time() + 120)
        store.save(session)
        key, ttl, payload = client.setex.call_args.args
        self.assertEqual(key, "lb:abc")
        self.assertGreater(ttl, 100)

        client.get.return_value = payload.encode("utf-8")
        loaded = store.get("abc")
        self.assertEqual(loaded.email, "a@b.c")
        self.assertEqual(json.loads(payload)["token"], "abc")

        client.get.return_value = None
        self.assertIsNone(store.get("abc"))

        store.delete("abc")
        client.delete.assert_called_once_with("lb:abc")


if __name__ == "__main__":
    unittest.main()
