"""SQLite database utilities for the affiliate links store.

Provides connection management and table initialization.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .config import settings

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS affiliate_links (
    id TEXT PRIMARY KEY,
    program TEXT NOT NULL,
    product TEXT NOT NULL,
    link TEXT NOT NULL UNIQUE,
    commission_rate REAL NOT NULL,
    category TEXT NOT NULL,
    tags TEXT,
    expiry TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    clicks INTEGER DEFAULT 0,
    conversions INTEGER DEFAULT 0,
    revenue REAL DEFAULT 0,
    notes TEXT
);

CREATE INDEX IF NOT EXISTS idx_program ON affiliate_links(program);
CREATE INDEX IF NOT EXISTS idx_category ON affiliate_links(category);
CREATE INDEX IF NOT EXISTS idx_commission ON affiliate_links(commission_rate);
CREATE INDEX IF NOT EXISTS idx_created ON affiliate_links(created_at);

CREATE TABLE IF NOT EXISTS link_clicks (
    id TEXT PRIMARY KEY,
    link_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    source TEXT,
    user_id TEXT,
    FOREIGN KEY (link_id) REFERENCES affiliate_links(id)
);

CREATE TABLE IF NOT EXISTS link_conversions (
    id TEXT PRIMARY KEY,
    link_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    amount REAL,
    order_id TEXT,
    FOREIGN KEY (link_id) REFERENCES affiliate_links(id)
);

CREATE INDEX IF NOT EXISTS idx_link_clicks ON link_clicks(link_id);
CREATE INDEX IF NOT EXISTS idx_link_conversions ON link_conversions(link_id);
"""


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Get a SQLite connection with row factory enabled."""
    path = Path(db_path) if db_path else settings.database.db_abs_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes on an open connection (idempotent)."""
    conn.executescript(_CREATE_TABLES_SQL)
    conn.commit()


def init_db(db_path: str | Path | None = None) -> None:
    """Create all tables if they don't exist."""
    conn = get_connection(db_path)
    try:
        create_schema(conn)
        logger.info("Database schema initialized at %s", db_path or settings.database.db_abs_path)
    finally:
        conn.close()
