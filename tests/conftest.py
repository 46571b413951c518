import os
import pytest
import sqlite3
from datetime import datetime
from open_dam.database.schema import init_schema
from open_dam.database.ops import CatalogStore

@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()

@pytest.fixture
def store(conn):
    """Returns a CatalogStore attached to the in-memory DB."""
    return CatalogStore(conn)

@pytest.fixture
def make_file():
    """Writes a file and backdates its timestamps to `created`."""
    def _make(path, created: datetime, data: bytes = b"data"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        ts = created.timestamp()
        os.utime(path, (ts, ts))
        return path
    return _make
