"""SQLite helper for the local state database (suppression markers)."""

import sqlite3
from pathlib import Path


def wal_connect(db_path: str | Path, row_factory: bool = False, timeout: float = 5.0) -> sqlite3.Connection:
    """Open a connection in WAL mode so the CLI and other readers don't block each other.

    Args:
        db_path: Path to database file.
        row_factory: If True, rows come back as sqlite3.Row.
        timeout: Seconds to wait on a locked database.
    """
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.execute("PRAGMA journal_mode=WAL")
    if row_factory:
        conn.row_factory = sqlite3.Row
    return conn
