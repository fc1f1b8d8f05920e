"""
Session storage backing the auth lookup.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production. Sessions are opaque tokens mapped to the
user record they were issued for.
"""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Minimal interface for issuing and resolving session tokens."""

    def create(self, user: dict) -> str:
        ...

    def get(self, token: str) -> Optional[dict]:
        ...

    def delete(self, token: str) -> None:
        ...


def _new_token() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class InMemorySessionStore:
    """Dictionary-backed sessions for testing/dev."""

    sessions: dict[str, dict] = field(default_factory=dict)

    def create(self, user: dict) -> str:
        token = _new_token()
        self.sessions[token] = dict(user)
        return token

    def get(self, token: str) -> Optional[dict]:
        user = self.sessions.get(token)
        return dict(user) if user is not None else None

    def delete(self, token: str) -> None:
        self.sessions.pop(token, None)

    def reset(self) -> None:
        self.sessions.clear()


@dataclass
class RedisSessionStore:
    """Redis-backed sessions stored as JSON strings with a TTL."""

    url: str
    key_prefix: str = "blob_admin:session:"
    ttl_seconds: int = 86400

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def create(self, user: dict) -> str:
        token = _new_token()
        self.client.set(self._key(token), json.dumps(user), ex=self.ttl_seconds)
        return token

    def get(self, token: str) -> Optional[dict]:
        try:
            raw = self.client.get(self._key(token))
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections. Treat the lookup as a miss
            # and reconnect for the next request.
            logger.warning("Redis connection lost while resolving session")
            self.client = redis.Redis.from_url(self.url)
            return None
        if raw is None:
            return None
        try:
            user = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed session record")
            return None
        return user if isinstance(user, dict) else None

    def delete(self, token: str) -> None:
        self.client.delete(self._key(token))
