# local sqlite store: last good products payload and the session token
import asyncio
import json
import os.path
import time
from contextlib import asynccontextmanager
from sqlite3 import Row
from typing import Any, Optional

import aiosqlite

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS payload_cache (
    name       TEXT PRIMARY KEY,
    body       TEXT NOT NULL,
    stored_at  REAL NOT NULL
);
CREATE TABLE IF NOT EXISTS session (
    id     INTEGER PRIMARY KEY CHECK (id = 1),
    token  TEXT NOT NULL
);
"""

PRODUCTS = "products"

_initialized = False
_init_lock = asyncio.Lock()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding a connection to the cache file.

    Creates the file and tables on first use.
    """
    global _initialized
    folder = os.path.dirname(config.CACHE_PATH)
    if folder:
        os.makedirs(folder, exist_ok=True)

    conn = await aiosqlite.connect(config.CACHE_PATH)
    conn.row_factory = Row
    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    _logger.debug(f"Preparing cache at {config.CACHE_PATH}")
                    await conn.executescript(SCHEMA)
                    await conn.commit()
                    _initialized = True
        yield conn
    finally:
        await conn.close()


def reset() -> None:
    """Forget that the schema was created, e.g. after CACHE_PATH changed."""
    global _initialized
    _initialized = False


# ---------------------------
# Payloads
# ---------------------------


async def store_payload(name: str, body: Any, when: Optional[float] = None) -> None:
    when = time.time() if when is None else when
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO payload_cache(name, body, stored_at) VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET body = excluded.body,
                                            stored_at = excluded.stored_at;
            """,
            (name, json.dumps(body), when),
        )
        await conn.commit()


async def load_payload(
    name: str, max_age: Optional[float] = None, now: Optional[float] = None
) -> Optional[Any]:
    """Return the cached body, or None if missing or older than max_age seconds."""
    now = time.time() if now is None else now
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT body, stored_at FROM payload_cache WHERE name = ?;", (name,)
        )
        row = await cur.fetchone()
        await cur.close()
    if not row:
        return None
    if max_age is not None and now - row["stored_at"] > max_age:
        _logger.debug(f"Cached {name} expired")
        return None
    return json.loads(row["body"])


async def store_products(payload: Any, when: Optional[float] = None) -> None:
    await store_payload(PRODUCTS, payload, when)


async def load_products(now: Optional[float] = None) -> Optional[Any]:
    return await load_payload(PRODUCTS, config.PRODUCTS_CACHE_MAX_AGE, now)


# ---------------------------
# Session token
# ---------------------------


async def save_token(token: str) -> None:
    async with connect() as conn:
        await conn.execute(
            "INSERT OR REPLACE INTO session(id, token) VALUES (1, ?);", (token,)
        )
        await conn.commit()


async def load_token() -> Optional[str]:
    async with connect() as conn:
        cur = await conn.execute("SELECT token FROM session WHERE id = 1;")
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def clear_token() -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM session;")
        await conn.commit()
