"""
Database connection management.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from .. import config
from ..exceptions import StoreError
from .schema import init_schema

def marker_path(root: Path) -> Path:
    return root / config.MARKER_NAME

class DBManager:
    def __init__(self, root: Path):
        self.root = root
        self.db_path = marker_path(root)
        self._conn: Optional[sqlite3.Connection] = None

    def exists(self) -> bool:
        return self.db_path.exists()

    def connect(self) -> sqlite3.Connection:
        """
        Connects to the SQLite database and configures pragmas.
        Creates the marker file when it does not exist yet.
        """
        if self._conn:
            return self._conn

        logging.debug(f"Connecting to database: {self.db_path}")
        try:
            self._conn = sqlite3.connect(self.db_path)

            # Default rollback journal: no extra -wal/-shm files next to the marker
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._conn.execute("PRAGMA temp_store=MEMORY;")

            # Ensure schema exists
            init_schema(self._conn)
        except sqlite3.Error as e:
            self.close()
            raise StoreError(f"Cannot open catalog store {self.db_path}: {e}") from e

        return self._conn

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
