"""SQLite-backed durable session storage: load at the start of a round-trip, save at the end."""

import logging
import time
from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from ingest.session import SessionState

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ingest_sessions (
    session_id  TEXT PRIMARY KEY,
    data        TEXT NOT NULL,
    created_at  REAL NOT NULL,
    updated_at  REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_is_updated ON ingest_sessions(updated_at);
"""


class SessionStore:
    """One short-lived connection per call. Sessions idle past timeout_sec count as abandoned."""

    def __init__(
        self, db_path: Path, timeout_sec: float = 1800, busy_timeout: int = 5000
    ) -> None:
        self._db_path = db_path
        self._timeout_sec = timeout_sec
        self._busy_timeout = busy_timeout

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self._db_path))
        await conn.execute(f"PRAGMA busy_timeout={self._busy_timeout}")
        await conn.executescript(_SCHEMA)
        await conn.commit()
        return conn

    def _is_expired(self, updated_at: float, now: float | None = None) -> bool:
        if self._timeout_sec <= 0:
            return False
        return (now or time.time()) - updated_at > self._timeout_sec

    async def save(self, state: SessionState) -> None:
        """Insert or replace the session row."""
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO ingest_sessions (session_id, data, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
                """,
                (state.session_id, state.model_dump_json(), state.created_at, time.time()),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def load(self, session_id: str) -> SessionState | None:
        """Return the saved session, or None when missing, expired or unreadable."""
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "SELECT data, updated_at FROM ingest_sessions WHERE session_id = ?",
                (session_id,),
            )
            row = await cursor.fetchone()
        finally:
            await conn.close()
        if row is None:
            return None
        data, updated_at = row
        if self._is_expired(updated_at):
            logger.info("Ingest session %s expired", session_id)
            return None
        try:
            return SessionState.model_validate_json(data)
        except ValidationError as e:
            logger.error("Stored ingest session %s is unreadable: %s", session_id, e)
            return None

    async def delete(self, session_id: str) -> None:
        conn = await self._connect()
        try:
            await conn.execute("DELETE FROM ingest_sessions WHERE session_id = ?", (session_id,))
            await conn.commit()
        finally:
            await conn.close()

    async def purge_expired(self) -> int:
        """Delete abandoned sessions. Returns number of rows removed."""
        if self._timeout_sec <= 0:
            return 0
        cutoff = time.time() - self._timeout_sec
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "DELETE FROM ingest_sessions WHERE updated_at < ?", (cutoff,)
            )
            await conn.commit()
            count = cursor.rowcount or 0
        finally:
            await conn.close()
        if count:
            logger.info("Purged %d abandoned ingest session(s)", count)
        return count
