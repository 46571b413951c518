import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from ..exceptions import NotFoundError, StoreError
from ..models import CatalogEntry

_COLUMNS = "id, name, path, created, thumbnail"

def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

class CatalogStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def upsert(self, entry: CatalogEntry):
        """
        Inserts the entry, or updates name/path/created of the existing row
        with the same id. The stored thumbnail is only replaced when the entry
        carries one.
        """
        try:
            with self.conn:
                self.conn.execute(f"""
                    INSERT INTO entry ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT (id) DO UPDATE SET
                        name = excluded.name,
                        path = excluded.path,
                        created = excluded.created,
                        thumbnail = COALESCE(excluded.thumbnail, entry.thumbnail)
                """, (
                    entry.id, entry.name, str(entry.path),
                    entry.created.isoformat(), entry.thumbnail
                ))
        except sqlite3.Error as e:
            raise StoreError(f"Failed to save entry {entry.id} ({entry.name}): {e}") from e

    def get(self, entry_id: int) -> CatalogEntry:
        row = self._fetchone(f"SELECT {_COLUMNS} FROM entry WHERE id = ?", (entry_id,))
        if row is None:
            raise NotFoundError(f"No entry with id {entry_id}")
        return self._load(row)

    def find_by_name(self, text: str) -> CatalogEntry:
        """First entry (by id) whose name contains `text`."""
        row = self._fetchone(f"""
            SELECT {_COLUMNS} FROM entry
            WHERE name LIKE ? ESCAPE '\\'
            ORDER BY id
            LIMIT 1
        """, (f"%{_escape_like(text)}%",))
        if row is None:
            raise NotFoundError(f"No entry matching '{text}'")
        return self._load(row)

    def list_entries(self) -> List[CatalogEntry]:
        try:
            cur = self.conn.execute(f"SELECT {_COLUMNS} FROM entry ORDER BY id")
            return [self._load(r) for r in cur.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list entries: {e}") from e

    def count(self) -> int:
        return self._fetchone("SELECT COUNT(*) FROM entry", ())[0]

    def _fetchone(self, sql: str, params: tuple) -> Optional[Tuple]:
        try:
            return self.conn.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Catalog query failed: {e}") from e

    @staticmethod
    def _load(row: Tuple) -> CatalogEntry:
        entry_id, name, path, created, thumbnail = row
        return CatalogEntry(
            id=entry_id,
            name=name,
            path=Path(path),
            created=datetime.fromisoformat(created),
            thumbnail=bytes(thumbnail) if thumbnail is not None else None,
        )
