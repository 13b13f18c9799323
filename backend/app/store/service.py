"""DuckDB-backed document store for participants and messages.

This module provides the persistence layer shared by the presence
registry, the message log and the inactivity reaper.

Database Schema:
    participants table:
        - seq: Insertion order
        - name: Participant name (primary key, enforces one record per name)
        - last_status: Epoch milliseconds of the last heartbeat

    messages table:
        - seq: Insertion order
        - id: UUID assigned on insert (primary key)
        - from_name, to_name, text, type, time

Concurrency:
    Every public method is a coroutine. The blocking DuckDB call runs in the
    default executor on its own cursor, so requests and the reaper never
    block the event loop. Statements are serialised by ``_lock``: DuckDB
    rejects concurrent writes to the same row with a transaction conflict.
    There are no cross-table transactions: each method is a single
    autocommitted statement.
"""
import asyncio
import logging
import threading
import uuid
from typing import Any, Callable, List, Optional

import duckdb

from app.errors import Conflict, StoreFailure

from .models import Message, MessageType, Participant

logger = logging.getLogger(__name__)


class ChatStore:
    """Owns the DuckDB connection holding both chat collections.

    A store is created once at startup and handed to the services that
    need it; tests create their own instance on ``:memory:``.

    Attributes:
        _db_path: Path to the DuckDB database file.
    """

    _db_path: str = "bate_papo.duckdb"

    def __init__(self, db_path: Optional[str] = None) -> None:
        """Open the database and create the schema if needed.

        Args:
            db_path: Path to DuckDB file, or ``:memory:``.
        """
        if db_path:
            self._db_path = db_path
        self._connection: Optional[duckdb.DuckDBPyConnection] = duckdb.connect(self._db_path)
        self._lock = threading.Lock()
        self._initialize_db()
        logger.info("[ChatStore] Initialized with db=%s", self._db_path)

    def _initialize_db(self) -> None:
        """Create sequences and tables (idempotent)."""
        conn = self._connection
        conn.execute("CREATE SEQUENCE IF NOT EXISTS participants_seq START 1")
        conn.execute("CREATE SEQUENCE IF NOT EXISTS messages_seq START 1")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS participants (
                seq BIGINT DEFAULT nextval('participants_seq'),
                name VARCHAR PRIMARY KEY,
                last_status BIGINT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq BIGINT DEFAULT nextval('messages_seq'),
                id VARCHAR PRIMARY KEY,
                from_name VARCHAR NOT NULL,
                to_name VARCHAR NOT NULL,
                text VARCHAR NOT NULL,
                type VARCHAR NOT NULL,
                time VARCHAR NOT NULL
            )
        """)

    # -----------------------------------------------------------------------
    # Execution helpers
    # -----------------------------------------------------------------------

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._call, fn, args)

    def _call(self, fn: Callable[..., Any], args: tuple) -> Any:
        with self._lock:
            if self._connection is None:
                raise StoreFailure("store is closed")
            try:
                cursor = self._connection.cursor()
            except duckdb.Error as exc:
                raise StoreFailure(str(exc)) from exc
            try:
                return fn(cursor, *args)
            except duckdb.Error as exc:
                logger.exception("[ChatStore] %s failed", fn.__name__)
                raise StoreFailure(str(exc)) from exc
            finally:
                cursor.close()

    # -----------------------------------------------------------------------
    # Participants
    # -----------------------------------------------------------------------

    async def insert_participant(self, name: str, last_status: int) -> Participant:
        """Insert a participant; raises Conflict if the name is taken."""

        def _insert(cur, name, last_status):
            try:
                cur.execute(
                    "INSERT INTO participants (name, last_status) VALUES (?, ?)",
                    [name, last_status],
                )
            except (duckdb.ConstraintException, duckdb.TransactionException) as exc:
                raise Conflict(f"participant {name!r} already exists") from exc
            return Participant(name=name, lastStatus=last_status)

        return await self._run(_insert, name, last_status)

    async def find_participant(self, name: str) -> Optional[Participant]:
        def _find(cur, name):
            row = cur.execute(
                "SELECT name, last_status FROM participants WHERE name = ?", [name]
            ).fetchone()
            return Participant(name=row[0], lastStatus=row[1]) if row else None

        return await self._run(_find, name)

    async def update_participant_status(self, name: str, last_status: int) -> bool:
        """Set ``last_status``; returns False when the participant is gone."""

        def _update(cur, name, last_status):
            row = cur.execute(
                "UPDATE participants SET last_status = ? WHERE name = ? RETURNING name",
                [last_status, name],
            ).fetchone()
            return row is not None

        return await self._run(_update, name, last_status)

    async def delete_participant(self, name: str) -> bool:
        def _delete(cur, name):
            row = cur.execute(
                "DELETE FROM participants WHERE name = ? RETURNING name", [name]
            ).fetchone()
            return row is not None

        return await self._run(_delete, name)

    async def list_participants(self) -> List[Participant]:
        """Every participant, in join order."""

        def _list(cur):
            rows = cur.execute(
                "SELECT name, last_status FROM participants ORDER BY seq ASC"
            ).fetchall()
            return [Participant(name=r[0], lastStatus=r[1]) for r in rows]

        return await self._run(_list)

    # -----------------------------------------------------------------------
    # Messages
    # -----------------------------------------------------------------------

    _MESSAGE_COLUMNS = "id, from_name, to_name, text, type, time"

    @staticmethod
    def _row_to_message(row) -> Message:
        return Message(
            id=row[0],
            from_=row[1],
            to=row[2],
            text=row[3],
            type=MessageType(row[4]),
            time=row[5],
        )

    async def insert_message(
        self,
        from_name: str,
        to_name: str,
        text: str,
        type_: str,
        time: str,
    ) -> Message:
        """Append a message and return it with its new id."""
        message_id = str(uuid.uuid4())

        def _insert(cur):
            cur.execute(
                """
                INSERT INTO messages (id, from_name, to_name, text, type, time)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [message_id, from_name, to_name, text, type_, time],
            )
            return Message(
                id=message_id,
                from_=from_name,
                to=to_name,
                text=text,
                type=MessageType(type_),
                time=time,
            )

        return await self._run(_insert)

    async def find_message(self, message_id: str) -> Optional[Message]:
        def _find(cur, message_id):
            row = cur.execute(
                f"SELECT {self._MESSAGE_COLUMNS} FROM messages WHERE id = ?",
                [message_id],
            ).fetchone()
            return self._row_to_message(row) if row else None

        return await self._run(_find, message_id)

    async def update_message(
        self, message_id: str, to_name: str, text: str, type_: str
    ) -> bool:
        """Replace the mutable fields of a message."""

        def _update(cur):
            row = cur.execute(
                """
                UPDATE messages SET to_name = ?, text = ?, type = ?
                WHERE id = ? RETURNING id
                """,
                [to_name, text, type_, message_id],
            ).fetchone()
            return row is not None

        return await self._run(_update)

    async def delete_message(self, message_id: str) -> bool:
        def _delete(cur, message_id):
            row = cur.execute(
                "DELETE FROM messages WHERE id = ? RETURNING id", [message_id]
            ).fetchone()
            return row is not None

        return await self._run(_delete, message_id)

    async def list_messages(self) -> List[Message]:
        """Full snapshot of the message log, oldest first."""

        def _list(cur):
            rows = cur.execute(
                f"SELECT {self._MESSAGE_COLUMNS} FROM messages ORDER BY seq ASC"
            ).fetchall()
            return [self._row_to_message(r) for r in rows]

        return await self._run(_list)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
