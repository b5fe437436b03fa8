"""
Client storage backend (SQLite).

Keeps one connection open for the life of the process. Callers that need a
read-modify-write sequence wrap it in ``transaction()``, which serialises
access and commits or rolls back as a unit.
"""
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Iterator

from .schema import Client, Lane

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "status", "position", "priority")


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection shareable across Flask worker threads, in WAL mode."""
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class ClientStore:
    """SQLite-backed store for client cards."""

    def __init__(self, db_path: str = "clients.db"):
        """Open the database and create tables if needed."""
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = _connect(db_path)
        self._lock = threading.RLock()
        self._depth = 0
        self._init_schema()

    def _init_schema(self):
        """Create tables if they don't exist."""
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS clients (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'backlog',
                    position INTEGER NOT NULL DEFAULT 0,
                    priority INTEGER
                )
            """)
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_clients_status ON clients(status)"
            )
            self._conn.commit()
        logger.debug(f"Client schema ready in {self.db_path}")

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info(f"Closed client store {self.db_path}")

    # ──────────────────────────────────────────
    # Transactions
    # ──────────────────────────────────────────

    @contextmanager
    def transaction(self) -> Iterator["ClientStore"]:
        """
        Hold the store lock and run the block as one SQLite transaction.

        Nested scopes join the outermost one; only the outermost commits.
        Any exception rolls back every write made inside the scope.
        """
        with self._lock:
            self._depth += 1
            try:
                yield self
            except Exception:
                self._depth -= 1
                if self._depth == 0:
                    self._conn.rollback()
                    logger.warning("Rolled back client store transaction")
                raise
            else:
                self._depth -= 1
                if self._depth == 0:
                    self._conn.commit()

    def _commit(self) -> None:
        if self._depth == 0:
            self._conn.commit()

    # ──────────────────────────────────────────
    # Reads
    # ──────────────────────────────────────────

    def list_all(self) -> List[Client]:
        """List every client, ordered by id."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM clients ORDER BY id ASC"
            ).fetchall()
        return [self._row_to_client(row) for row in rows]

    def list_by_status(self, status: Lane) -> List[Client]:
        """List the clients in one lane, ordered by id."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM clients WHERE status = ? ORDER BY id ASC",
                (status.value,)
            ).fetchall()
        return [self._row_to_client(row) for row in rows]

    def get(self, client_id: int) -> Optional[Client]:
        """Retrieve a client by id, or None."""
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM clients WHERE id = ? LIMIT 1",
                (client_id,)
            ).fetchone()
        return self._row_to_client(row) if row else None

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM clients").fetchone()[0]

    # ──────────────────────────────────────────
    # Writes
    # ──────────────────────────────────────────

    def update_fields(self, client_id: int, **fields) -> None:
        """
        Overwrite the given columns of one client.

        Accepts any of UPDATABLE_FIELDS; ``status`` may be a Lane or its
        string value, ``priority=None`` clears the priority.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown client fields: {', '.join(sorted(unknown))}")
        if not fields:
            return
        if isinstance(fields.get("status"), Lane):
            fields["status"] = fields["status"].value

        columns = ", ".join(f"{name} = ?" for name in fields)
        with self._lock:
            self._conn.execute(
                f"UPDATE clients SET {columns} WHERE id = ?",
                (*fields.values(), client_id)
            )
            self._commit()

    def add(
        self,
        name: str,
        status: Lane = Lane.BACKLOG,
        position: Optional[int] = None,
        priority: Optional[int] = None,
        description: Optional[str] = None,
        client_id: Optional[int] = None,
    ) -> Client:
        """
        Insert a client. Without an explicit position it goes to the end
        of its lane.
        """
        with self._lock:
            if position is None:
                row = self._conn.execute(
                    "SELECT COALESCE(MAX(position), 0) FROM clients WHERE status = ?",
                    (status.value,)
                ).fetchone()
                position = row[0] + 1
            cur = self._conn.execute("""
                INSERT INTO clients (id, name, description, status, position, priority)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (client_id, name, description, status.value, position, priority))
            self._commit()
            new_id = cur.lastrowid
        return Client(
            id=new_id,
            name=name,
            description=description,
            status=status,
            position=position,
            priority=priority,
        )

    def _row_to_client(self, row: sqlite3.Row) -> Client:
        """Convert a database row to a Client object."""
        return Client.from_dict(dict(row))
