"""
Server-side login sessions.

The browser only ever sees an opaque random token in a cookie; the store maps
that token to a user id. A session dies after ``idle_timeout`` seconds without
use or ``max_lifetime`` seconds after login, whichever comes first.
"""
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from teamflow.core.security import generate_session_token

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class SessionStore(ABC):
    def __init__(self, idle_timeout: int, max_lifetime: int, clock: Callable[[], float] = time.time):
        self.idle_timeout = idle_timeout
        self.max_lifetime = max_lifetime
        self.clock = clock

    @abstractmethod
    async def create(self, user_id: int) -> str:
        """Start a session for the user and return its token"""

    @abstractmethod
    async def get_user_id(self, token: str) -> Optional[int]:
        """Resolve a token to a user id, refreshing the idle timer; None if unknown or expired"""

    @abstractmethod
    async def destroy(self, token: str) -> None: ...


class MemorySessionStore(SessionStore):
    def __init__(self, idle_timeout: int, max_lifetime: int, clock: Callable[[], float] = time.time):
        super().__init__(idle_timeout, max_lifetime, clock)
        self.sessions: Dict[str, Dict[str, float]] = {}

    async def create(self, user_id: int) -> str:
        token = generate_session_token()
        now = self.clock()
        self.sessions[token] = {"user_id": user_id, "created_at": now, "last_seen": now}
        return token

    async def get_user_id(self, token: str) -> Optional[int]:
        session = self.sessions.get(token)
        if session is None:
            return None
        now = self.clock()
        if now - session["last_seen"] > self.idle_timeout or now - session["created_at"] > self.max_lifetime:
            del self.sessions[token]
            return None
        session["last_seen"] = now
        return int(session["user_id"])

    async def destroy(self, token: str) -> None:
        self.sessions.pop(token, None)


class RedisSessionStore(SessionStore):
    """Sessions kept in Redis; the key TTL implements the idle timeout"""

    def __init__(self, client, idle_timeout: int, max_lifetime: int, clock: Callable[[], float] = time.time):
        super().__init__(idle_timeout, max_lifetime, clock)
        self.client = client

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"

    async def create(self, user_id: int) -> str:
        token = generate_session_token()
        payload = json.dumps({"user_id": user_id, "created_at": self.clock()})
        await self.client.set(self._key(token), payload, ex=self.idle_timeout)
        return token

    async def get_user_id(self, token: str) -> Optional[int]:
        key = self._key(token)
        raw = await self.client.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            user_id = int(data["user_id"])
            created_at = float(data["created_at"])
        except (ValueError, KeyError, TypeError):
            logger.warning("Dropping malformed session record %s", key)
            await self.client.delete(key)
            return None
        if self.clock() - created_at > self.max_lifetime:
            await self.client.delete(key)
            return None
        await self.client.expire(key, self.idle_timeout)
        return user_id

    async def destroy(self, token: str) -> None:
        await self.client.delete(self._key(token))
