"""
PostgreSQL user store on an asyncpg connection pool
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from database.seed import seed_users
from database.store import DuplicateKeyError, EMAIL_CONSTRAINT

logger = logging.getLogger(__name__)

# API field name -> column name
COLUMNS = {
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "dayOfBirth": "day_of_birth",
    "email": "email",
}

CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS users (
        id BIGSERIAL PRIMARY KEY,
        first_name VARCHAR(15) NOT NULL,
        last_name VARCHAR(30) NOT NULL,
        day_of_birth DATE NOT NULL,
        email VARCHAR(255) NOT NULL,
        CONSTRAINT {EMAIL_CONSTRAINT} UNIQUE (email)
    )
"""

SELECT_FIELDS = ", ".join(f"{column} AS \"{field}\"" for field, column in COLUMNS.items())


def build_list_query(order_by: Optional[List[Dict[str, str]]], limit: int, offset: int) -> Tuple[str, List[Any]]:
    """Build the paged SELECT for the users collection"""
    query = f"SELECT {SELECT_FIELDS} FROM users"

    order_parts = []
    for order_clause in order_by or []:
        column = COLUMNS[order_clause["field"]]
        direction = order_clause.get("dir", "asc").upper()
        order_parts.append(f"{column} {direction}")
    if "id ASC" not in order_parts and "id DESC" not in order_parts:
        order_parts.append("id ASC")
    query += f" ORDER BY {', '.join(order_parts)}"

    query += " LIMIT $1 OFFSET $2"
    return query, [limit, offset]


def build_update_query(user_id: int, values: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """Build an UPDATE ... RETURNING for the given fields"""
    params = []
    set_parts = []
    for param_counter, (field_name, value) in enumerate(values.items(), start=1):
        set_parts.append(f"{COLUMNS[field_name]} = ${param_counter}")
        params.append(value)

    params.append(user_id)
    query = f"UPDATE users SET {', '.join(set_parts)} WHERE id = ${len(params)} RETURNING {SELECT_FIELDS}"
    return query, params


class PostgresUserStore:
    """User store backed by a PostgreSQL table"""

    def __init__(self, pool: asyncpg.Pool, seed: Optional[List[Dict[str, Any]]] = None):
        self.pool = pool
        self._seed = seed_users() if seed is None else seed

    async def create_schema(self):
        async with self.pool.acquire() as conn:
            await conn.execute(CREATE_TABLE_SQL)
        logger.info("Users table ensured")

    async def _insert_seed(self, conn):
        await conn.executemany(
            "INSERT INTO users (first_name, last_name, day_of_birth, email) VALUES ($1, $2, $3, $4)",
            [(row["firstName"], row["lastName"], row["dayOfBirth"], row["email"])
             for row in sorted(self._seed, key=lambda row: row["id"])]
        )

    async def ping(self) -> bool:
        async with self.pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return True

    async def close(self):
        await self.pool.close()
        logger.info("Database connections closed")

    async def reset(self):
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute("TRUNCATE users RESTART IDENTITY")
                await self._insert_seed(conn)
        logger.info(f"Users table reset to {len(self._seed)} seed users")

    async def seed_if_empty(self):
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                if await conn.fetchval("SELECT COUNT(*) FROM users") == 0:
                    await self._insert_seed(conn)
                    logger.info(f"Seeded {len(self._seed)} users")

    async def count(self) -> int:
        async with self.pool.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM users")

    async def list(
        self,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        query, params = build_list_query(order_by, limit, offset)
        logger.info(f"Executing READ query: {query}")
        logger.info(f"Parameters: {params}")

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
        return [dict(row) for row in rows]

    async def get(self, user_id: int) -> Optional[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT {SELECT_FIELDS} FROM users WHERE id = $1", user_id)
        return dict(row) if row else None

    async def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        fields = list(values.keys())
        placeholders = [f"${index}" for index in range(1, len(fields) + 1)]
        query = f"""
            INSERT INTO users ({', '.join(COLUMNS[field] for field in fields)})
            VALUES ({', '.join(placeholders)})
            RETURNING {SELECT_FIELDS}
        """
        logger.info(f"Executing INSERT: {query}")

        async with self.pool.acquire() as conn:
            async with conn.transaction():
                try:
                    row = await conn.fetchrow(query, *values.values())
                except asyncpg.UniqueViolationError as e:
                    logger.warning(f"Unique constraint violation: {e}")
                    raise DuplicateKeyError(e.constraint_name or EMAIL_CONSTRAINT, str(e))

        if not row:
            raise RuntimeError("Insert operation failed - no data returned")
        return dict(row)

    async def update(self, user_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values = {key: value for key, value in values.items() if key != "id"}
        if not values:
            return await self.get(user_id)

        query, params = build_update_query(user_id, values)
        logger.info(f"Executing UPDATE: {query}")

        async with self.pool.acquire() as conn:
            async with conn.transaction():
                try:
                    row = await conn.fetchrow(query, *params)
                except asyncpg.UniqueViolationError as e:
                    logger.warning(f"Unique constraint violation: {e}")
                    raise DuplicateKeyError(e.constraint_name or EMAIL_CONSTRAINT, str(e))
        return dict(row) if row else None

    async def delete(self, user_id: int) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM users WHERE id = $1", user_id)
        # asyncpg returns "DELETE N" where N is the number of rows
        deleted_count = int(result.split()[-1]) if result else 0
        logger.info(f"Executing DELETE for user {user_id}: {deleted_count} row(s)")
        return deleted_count > 0
