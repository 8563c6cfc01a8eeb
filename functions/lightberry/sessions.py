"""
Admin session storage.

Supports an in-memory store for tests/local runs and a Redis-backed
implementation for production.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions


@dataclass
class AdminSession:
    token: str
    email: str
    user_id: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())
    expires_at: float = 0.0

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def as_dict(self) -> dict:
        return asdict(self)


class SessionStore(Protocol):
    """Minimal interface for persisting admin sessions by token."""

    def save(self, session: AdminSession) -> None:
        ...

    def get(self, token: str) -> Optional[AdminSession]:
        ...

    def delete(self, token: str) -> None:
        ...


@dataclass
class InMemorySessionStore:
    """Process-local session store for testing/dev."""

    sessions: Dict[str, AdminSession] = field(default_factory=dict)

    def save(self, session: AdminSession) -> None:
        self.sessions[session.token] = session

    def get(self, token: str) -> Optional[AdminSession]:
        session = self.sessions.get(token)
        if session is None:
            return None
        if session.is_expired():
            self.sessions.pop(token, None)
            return None
        return session

    def delete(self, token: str) -> None:
        self.sessions.pop(token, None)

    def reset(self) -> None:
        self.sessions.clear()


@dataclass
class RedisSessionStore:
    """Redis-backed sessions; keys expire with the session."""

    url: str
    prefix: str = "lightberry:session:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, token: str) -> str:
        return f"{self.prefix}{token}"

    def _reconnect(self) -> None:
        self.client = redis.Redis.from_url(self.url)

    def save(self, session: AdminSession) -> None:
        ttl = max(1, int(session.expires_at - time.time()))
        payload = json.dumps(session.as_dict())
        try:
            self.client.setex(self._key(session.token), ttl, payload)
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise

    def get(self, token: str) -> Optional[AdminSession]:
        try:
            raw = self.client.get(self._key(token))
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect for the next call.
            self._reconnect()
            raise
        if raw is None:
            return None
        session = AdminSession(**json.loads(raw))
        if session.is_expired():
            return None
        return session

    def delete(self, token: str) -> None:
        try:
            self.client.delete(self._key(token))
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise
