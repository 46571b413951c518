"""
Database schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1

def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        # Initialize version if missing
        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Entry Table
        # id is the path checksum, never reassigned by upserts
        conn.execute("""
        CREATE TABLE IF NOT EXISTS entry (
            id              INTEGER PRIMARY KEY,
            name            TEXT NOT NULL,
            path            TEXT NOT NULL,
            created         TEXT NOT NULL,        -- ISO-8601
            thumbnail       BLOB
        );
        """)

        # 3. Indices
        conn.execute("CREATE INDEX IF NOT EXISTS idx_entry_name ON entry(name);")

    logging.debug("Database schema initialized.")
