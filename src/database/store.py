"""
User store primitives and the in-memory snapshot store
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from database.seed import seed_users

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "users_email_key"


class DuplicateKeyError(Exception):
    """Raised when a write violates a unique constraint"""

    def __init__(self, constraint: str, detail: str):
        super().__init__(detail)
        self.constraint = constraint
        self.detail = detail


class InMemoryUserStore:
    """
    Dict-backed user store used when no DATABASE_URL is configured.

    Mirrors the PostgreSQL store: sequential ids that are never reused,
    a unique email constraint, and reset() back to the seed snapshot.
    """

    def __init__(self, seed: Optional[List[Dict[str, Any]]] = None):
        self._seed = seed_users() if seed is None else seed
        self._lock = asyncio.Lock()
        self._users: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1

    def _load(self, rows: List[Dict[str, Any]]):
        self._users = {row["id"]: dict(row) for row in rows}
        self._next_id = max(self._users, default=0) + 1

    def _check_email(self, email: str, exclude_id: Optional[int] = None):
        for user_id, user in self._users.items():
            if user["email"] == email and user_id != exclude_id:
                raise DuplicateKeyError(
                    EMAIL_CONSTRAINT,
                    f'duplicate key value violates unique constraint "{EMAIL_CONSTRAINT}": (email)=({email})'
                )

    async def ping(self) -> bool:
        return True

    async def close(self):
        pass

    async def reset(self):
        async with self._lock:
            self._load(self._seed)
        logger.info(f"In-memory store reset to {len(self._seed)} seed users")

    async def seed_if_empty(self):
        async with self._lock:
            if not self._users:
                self._load(self._seed)

    async def count(self) -> int:
        return len(self._users)

    async def list(
        self,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        rows = sorted(self._users.values(), key=lambda row: row["id"])
        # Stable sorts applied from the least to the most significant key
        for order_spec in reversed(order_by or []):
            rows.sort(key=lambda row: row[order_spec["field"]], reverse=order_spec.get("dir", "asc") == "desc")
        return [dict(row) for row in rows[offset:offset + limit]]

    async def get(self, user_id: int) -> Optional[Dict[str, Any]]:
        user = self._users.get(user_id)
        return dict(user) if user else None

    async def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            self._check_email(values["email"])
            user = {"id": self._next_id, **values}
            self._users[user["id"]] = user
            self._next_id += 1
            logger.info(f"Inserted user {user['id']}")
            return dict(user)

    async def update(self, user_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if "email" in values:
                self._check_email(values["email"], exclude_id=user_id)
            user.update({key: value for key, value in values.items() if key != "id"})
            logger.info(f"Updated user {user_id}")
            return dict(user)

    async def delete(self, user_id: int) -> bool:
        async with self._lock:
            deleted = self._users.pop(user_id, None) is not None
        if deleted:
            logger.info(f"Deleted user {user_id}")
        return deleted
