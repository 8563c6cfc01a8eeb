"""
Admin credentials and session handling.

Two credential sources are supported: a fixed demo pair from settings, and
admin users stored in the hosted SQL store. Sessions are opaque random
tokens kept in a `SessionStore`.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from lightberry.db import SqlProjectStore
from lightberry.fallback import (
    DEFAULT_TIMEOUT_SECONDS,
    OperationOutcome,
    OperationResult,
    run_safely,
)
from lightberry.sessions import AdminSession, SessionStore

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6
PBKDF2_ITERATIONS = 260_000
HASH_ALGORITHM = "pbkdf2_sha256"

INVALID_CREDENTIALS = "Invalid email or password"
STORE_NOT_CONFIGURED = "Store not configured"


class PasswordResetError(ValueError):
    """Raised when a new password is rejected before reaching the store."""


def hash_password(
    password: str, *, salt: Optional[str] = None, iterations: int = PBKDF2_ITERATIONS
) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, _ = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    candidate = hash_password(password, salt=salt, iterations=int(iterations))
    return hmac.compare_digest(candidate, encoded)


@dataclass
class Identity:
    email: str
    user_id: Optional[str] = None


class CredentialProvider(Protocol):
    """Checks an email/password pair."""

    @property
    def configured(self) -> bool:
        ...

    def authenticate(self, email: str, password: str) -> Optional[Identity]:
        ...


class DemoCredentialProvider:
    """Accepts exactly one hard-coded email/password pair."""

    def __init__(self, email: str, password: str):
        self.email = email.strip().lower()
        self.password = password

    @property
    def configured(self) -> bool:
        return True

    def authenticate(self, email: str, password: str) -> Optional[Identity]:
        email_ok = hmac.compare_digest(email.strip().lower(), self.email)
        password_ok = hmac.compare_digest(password, self.password)
        if email_ok and password_ok:
            return Identity(email=self.email, user_id="demo")
        return None


class StoreCredentialProvider:
    """Admin users kept in the hosted SQL store."""

    def __init__(self, store: Optional[SqlProjectStore]):
        self.store = store

    @property
    def configured(self) -> bool:
        return self.store is not None

    def authenticate(self, email: str, password: str) -> Optional[Identity]:
        user = self.store.get_admin_user(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            return None
        return Identity(email=user.email, user_id=user.user_id)

    def change_password(self, email: str, password: str) -> None:
        self.store.save_admin_user(email, hash_password(password))


class AdminAuthService:
    def __init__(
        self,
        provider: CredentialProvider,
        sessions: SessionStore,
        *,
        ttl_seconds: int = 60 * 60 * 24,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.provider = provider
        self.sessions = sessions
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout

    def login(self, email: str, password: str) -> OperationResult[Optional[AdminSession]]:
        def attempt() -> Optional[AdminSession]:
            identity = self.provider.authenticate(email, password)
            if identity is None:
                return None
            now = time.time()
            session = AdminSession(
                token=secrets.token_urlsafe(32),
                email=identity.email,
                user_id=identity.user_id,
                created_at=now,
                expires_at=now + self.ttl_seconds,
            )
            self.sessions.save(session)
            return session

        result = run_safely(
            attempt,
            None,
            name="login",
            timeout=self.timeout,
            configured=self.provider.configured,
        )
        if result.outcome is OperationOutcome.NOT_CONFIGURED:
            result.error = STORE_NOT_CONFIGURED
        elif result.outcome is OperationOutcome.SUCCEEDED and result.data is None:
            logger.info("Rejected admin login for %s", email)
            result.error = INVALID_CREDENTIALS
        return result

    def get_session(self, token: Optional[str]) -> OperationResult[Optional[AdminSession]]:
        if not token:
            return OperationResult(
                data=None,
                error=None,
                is_using_fallback=False,
                outcome=OperationOutcome.SUCCEEDED,
            )
        return run_safely(
            lambda: self.sessions.get(token),
            None,
            name="get_session",
            timeout=self.timeout,
        )

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        result = run_safely(
            lambda: self.sessions.delete(token),
            None,
            name="logout",
            timeout=self.timeout,
        )
        if result.error:
            logger.warning("Error during sign out: %s", result.error)

    def reset_password(
        self, session: AdminSession, password: str, confirm_password: str
    ) -> OperationResult[bool]:
        if password != confirm_password:
            raise PasswordResetError("Passwords do not match")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise PasswordResetError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
            )
        change_password = getattr(self.provider, "change_password", None)
        if change_password is None:
            raise PasswordResetError("Authentication service not available")

        def change() -> bool:
            change_password(session.email, password)
            return True

        result = run_safely(
            change,
            False,
            name="reset_password",
            timeout=self.timeout,
            configured=self.provider.configured,
        )
        if result.outcome is OperationOutcome.NOT_CONFIGURED:
            result.error = STORE_NOT_CONFIGURED
        return result
