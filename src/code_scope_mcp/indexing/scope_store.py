"""
PostgreSQL storage for serialized scope tables.

Each row holds the opaque binary scopes field of one file. Rows are keyed by
project name and file path, so re-indexing a file replaces its scopes.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import psycopg2
from psycopg2.extras import execute_values

from ..constants import SCOPE_FORMAT_VERSION
from ..scopes.codec import deserialize, serialize
from ..scopes.errors import CodecDecodeError
from ..scopes.models import ScopeTable

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS file_scopes (
    project_name TEXT NOT NULL,
    file_path TEXT NOT NULL,
    scopes BYTEA NOT NULL,
    entry_count INTEGER NOT NULL,
    format_version SMALLINT NOT NULL,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
    PRIMARY KEY (project_name, file_path)
);
"""

UPSERT_SQL = """
INSERT INTO file_scopes (project_name, file_path, scopes, entry_count, format_version)
VALUES %s
ON CONFLICT (project_name, file_path) DO UPDATE SET
    scopes = EXCLUDED.scopes,
    entry_count = EXCLUDED.entry_count,
    format_version = EXCLUDED.format_version,
    updated_at = NOW()
"""


class ScopeStoreError(Exception):
    """Raised when the scope store cannot be reached or updated."""

    pass


class ScopeStore:
    """Stores scope tables as BYTEA rows in PostgreSQL."""

    def __init__(self, db_connection_string: str, project_name: str = "default", connection=None):
        """
        Args:
            db_connection_string: PostgreSQL connection string
            project_name: Namespace for the stored files
            connection: Existing connection to reuse (mainly for tests)
        """
        self.db_connection_string = db_connection_string
        self.project_name = project_name
        self._conn = connection

    def _get_db_connection(self):
        """Create or reuse the database connection."""
        if self._conn is None or getattr(self._conn, "closed", 0):
            try:
                self._conn = psycopg2.connect(self.db_connection_string, connect_timeout=10)
            except psycopg2.OperationalError as e:
                raise ScopeStoreError(f"Cannot connect to scope store: {e}") from e
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def ensure_schema(self) -> None:
        """Create the file_scopes table if it does not exist (idempotent)."""
        conn = self._get_db_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()
            logger.info("✓ Scope store schema ready")
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to ensure scope store schema: {e}")
            raise ScopeStoreError(f"Failed to ensure schema: {e}") from e

    def _row(self, file_path: str, table: ScopeTable) -> Tuple:
        return (
            self.project_name,
            file_path,
            psycopg2.Binary(serialize(table)),
            table.size(),
            SCOPE_FORMAT_VERSION,
        )

    def save(self, file_path: str, table: ScopeTable) -> None:
        """Insert or replace the scopes of one file."""
        self.save_many([(file_path, table)])

    def save_many(self, items: Iterable[Tuple[str, ScopeTable]]) -> int:
        """
        Insert or replace the scopes of several files in one transaction.

        Returns:
            Number of rows written
        """
        rows = [self._row(path, table) for path, table in items]
        if not rows:
            return 0

        conn = self._get_db_connection()
        try:
            with conn.cursor() as cur:
                execute_values(cur, UPSERT_SQL, rows)
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to store scopes for {len(rows)} file(s): {e}")
            raise ScopeStoreError(f"Failed to store scopes: {e}") from e

        logger.debug(f"Stored scopes for {len(rows)} file(s)")
        return len(rows)

    def load_bytes(self, file_path: str) -> Optional[bytes]:
        """Return the raw stored bytes of a file, or None."""
        conn = self._get_db_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT scopes FROM file_scopes
                    WHERE project_name = %s AND file_path = %s
                    """,
                    (self.project_name, file_path)
                )
                row = cur.fetchone()
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to load scopes of {file_path}: {e}")
            raise ScopeStoreError(f"Failed to load scopes: {e}") from e

        if row is None:
            return None
        return bytes(row[0])

    def load(self, file_path: str) -> Optional[ScopeTable]:
        """
        Load the scopes of a file.

        Returns:
            The decoded table, or None when nothing usable is stored
        """
        data = self.load_bytes(file_path)
        if data is None:
            return None
        try:
            return deserialize(data)
        except CodecDecodeError as e:
            logger.warning(f"Stored scopes of {file_path} are unreadable, treating as absent: {e}")
            return None

    def delete(self, file_path: str) -> bool:
        """Delete the scopes of a file. Returns True if a row was removed."""
        conn = self._get_db_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM file_scopes WHERE project_name = %s AND file_path = %s",
                    (self.project_name, file_path)
                )
                deleted = cur.rowcount
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to delete scopes of {file_path}: {e}")
            raise ScopeStoreError(f"Failed to delete scopes: {e}") from e
        return deleted > 0

    def list_files(self) -> List[str]:
        """List the files of the project that have stored scopes."""
        conn = self._get_db_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT file_path FROM file_scopes WHERE project_name = %s ORDER BY file_path",
                    (self.project_name,)
                )
                files = [row[0] for row in cur.fetchall()]
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to list stored files: {e}")
            raise ScopeStoreError(f"Failed to list files: {e}") from e
        return files
