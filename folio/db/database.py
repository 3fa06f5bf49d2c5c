"""SQLite database connection and contact repository for Folio CRM.

Provides:
    - Connection management with WAL mode
    - Schema creation
    - ContactRepository operations backed by SQLite

Dates are stored as TEXT exactly as received, so an unparsable
last_contact survives a round trip and still reads as the stale sentinel.

Usage:
    from folio.db.database import Database

    db = Database()
    db.initialize()

    contact_id = db.create(Contact(name="Sarah Chen", company="Vertex AI Ventures"))
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from folio.core.config import get_config
from folio.core.exceptions import ContactNotFoundError, DatabaseError
from folio.core.logging import get_logger
from folio.db.models import VALID_STAGES, Contact, Stage, clamp_score
from folio.db.repository import ContactRepository

logger = get_logger(__name__)


# Schema version for migrations
SCHEMA_VERSION = 1


class Database(ContactRepository):
    """SQLite-backed contact repository.

    Attributes:
        db_path: Path to database file
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database.

        Args:
            db_path: Path to database file. Use ":memory:" for in-memory.
                    Defaults to config path.
        """
        if db_path is None:
            config = get_config()
            self.db_path = str(config.db_path)
        else:
            self.db_path = db_path

        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
                self._conn.execute("PRAGMA foreign_keys = ON")

                if self.db_path != ":memory:":
                    self._conn.execute("PRAGMA journal_mode = WAL")

            except sqlite3.Error as e:
                raise DatabaseError(f"Cannot connect to database: {e}") from e

        return self._conn

    @staticmethod
    def _lastrowid(cursor: sqlite3.Cursor) -> int:
        """Extract lastrowid from cursor (always set after INSERT in SQLite)."""
        row_id = cursor.lastrowid
        assert row_id is not None, "lastrowid was None after INSERT"
        return row_id

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def initialize(self) -> None:
        """Create schema if not exists."""
        with self._lock:
            conn = self._get_connection()
            try:
                conn.executescript(self._get_schema_ddl())
                conn.execute(
                    "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                    (SCHEMA_VERSION,),
                )
                conn.commit()
                logger.info("Database initialized", extra={"context": {"path": self.db_path}})
            except sqlite3.Error as e:
                raise DatabaseError(f"Cannot initialize database: {e}") from e

    def _get_schema_ddl(self) -> str:
        """Return complete schema DDL."""
        return """
        -- Contacts
        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT,
            phone TEXT,
            company TEXT NOT NULL,
            stage TEXT NOT NULL DEFAULT 'prospect',
            score INTEGER NOT NULL DEFAULT 0 CHECK (score BETWEEN 0 AND 100),
            last_contact TEXT,
            notes TEXT,
            created_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_contacts_stage ON contacts(stage);
        CREATE INDEX IF NOT EXISTS idx_contacts_email ON contacts(email);

        -- Tags
        CREATE TABLE IF NOT EXISTS contact_tags (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            contact_id INTEGER NOT NULL,
            tag_name TEXT NOT NULL,
            FOREIGN KEY (contact_id) REFERENCES contacts(id) ON DELETE CASCADE,
            UNIQUE(contact_id, tag_name)
        );

        CREATE INDEX IF NOT EXISTS idx_tags_contact ON contact_tags(contact_id);

        -- Schema Version
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """

    # =========================================================================
    # ROW CONVERSION
    # =========================================================================

    def _row_to_contact(self, row: sqlite3.Row, tags: list[str]) -> Contact:
        """Convert a database row to a Contact dataclass."""
        stage_val = row["stage"]
        stage = Stage(stage_val) if stage_val in VALID_STAGES else Stage.PROSPECT

        return Contact(
            id=row["id"],
            name=row["name"],
            email=row["email"] or "",
            phone=row["phone"] or "",
            company=row["company"],
            stage=stage,
            score=row["score"] or 0,
            last_contact=row["last_contact"],
            created_at=row["created_at"],
            tags=tags,
            notes=row["notes"] or "",
        )

    @staticmethod
    def _contact_params(contact: Contact) -> tuple[Any, ...]:
        stage = contact.stage.value if isinstance(contact.stage, Stage) else contact.stage
        return (
            contact.name,
            contact.email,
            contact.phone,
            contact.company,
            stage,
            clamp_score(contact.score),
            _to_text(contact.last_contact),
            contact.notes,
            _to_text(contact.created_at),
        )

    # =========================================================================
    # CONTACT OPERATIONS
    # =========================================================================

    def create(self, contact: Contact) -> int:
        """Create a contact record."""
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    """INSERT INTO contacts
                       (name, email, phone, company, stage, score,
                        last_contact, notes, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    self._contact_params(contact),
                )
                contact_id = self._lastrowid(cursor)
                self._replace_tags(conn, contact_id, contact.tags)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise DatabaseError(f"Failed to create contact: {e}") from e

        logger.info(
            "Contact created",
            extra={"context": {"contact_id": contact_id, "name": contact.name}},
        )
        return contact_id

    def find(self, contact_id: int) -> Contact:
        """Get contact by ID."""
        with self._lock:
            conn = self._get_connection()
            row = conn.execute("SELECT * FROM contacts WHERE id = ?", (contact_id,)).fetchone()
            if row is None:
                raise ContactNotFoundError(contact_id)
            return self._row_to_contact(row, self.get_tags(contact_id))

    def list(self) -> list[Contact]:
        """All contacts in id order, read as one snapshot."""
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute("SELECT * FROM contacts ORDER BY id").fetchall()
            tag_rows = conn.execute(
                "SELECT contact_id, tag_name FROM contact_tags ORDER BY id"
            ).fetchall()

        tags_by_contact: dict[int, list[str]] = {}
        for tag_row in tag_rows:
            tags_by_contact.setdefault(tag_row["contact_id"], []).append(tag_row["tag_name"])

        return [self._row_to_contact(row, tags_by_contact.get(row["id"], [])) for row in rows]

    def save(self, contact: Contact) -> None:
        """Update an existing contact."""
        if contact.id is None:
            raise ContactNotFoundError(-1)
        with self._lock:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    """UPDATE contacts SET
                       name = ?, email = ?, phone = ?, company = ?, stage = ?,
                       score = ?, last_contact = ?, notes = ?, created_at = ?
                       WHERE id = ?""",
                    self._contact_params(contact) + (contact.id,),
                )
                if cursor.rowcount == 0:
                    conn.rollback()
                    raise ContactNotFoundError(contact.id)
                self._replace_tags(conn, contact.id, contact.tags)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise DatabaseError(f"Failed to update contact: {e}") from e

    def delete(self, contact_id: int) -> Contact:
        """Delete a contact and its tags."""
        with self._lock:
            contact = self.find(contact_id)
            conn = self._get_connection()
            try:
                conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise DatabaseError(f"Failed to delete contact: {e}") from e

        logger.info("Contact deleted", extra={"context": {"contact_id": contact_id}})
        return contact

    # =========================================================================
    # TAG OPERATIONS
    # =========================================================================

    def _replace_tags(self, conn: sqlite3.Connection, contact_id: int, tags: list[str]) -> None:
        conn.execute("DELETE FROM contact_tags WHERE contact_id = ?", (contact_id,))
        conn.executemany(
            "INSERT OR IGNORE INTO contact_tags (contact_id, tag_name) VALUES (?, ?)",
            [(contact_id, tag) for tag in tags],
        )

    def get_tags(self, contact_id: int) -> list[str]:
        """Get all tags for contact, in insertion order."""
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT tag_name FROM contact_tags WHERE contact_id = ? ORDER BY id",
                (contact_id,),
            ).fetchall()
        return [row["tag_name"] for row in rows]

    def get_all_tags(self) -> list[str]:
        """Get all unique tags in system."""
        with self._lock:
            conn = self._get_connection()
            rows = conn.execute(
                "SELECT DISTINCT tag_name FROM contact_tags ORDER BY tag_name"
            ).fetchall()
        return [row["tag_name"] for row in rows]


def _to_text(value: Any) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
