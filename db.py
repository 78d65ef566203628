"""
Database connection utilities for the equipment cost calculator.

The fleet is kept as a handful of JSON blobs in a single sqlite key/value
table. Every connection runs in WAL mode and commits on a clean exit from
``get_db()``.
"""

import os
import sqlite3
import logging
from contextlib import contextmanager

from config import Config

logger = logging.getLogger(__name__)

FLEET_DB = Config.FLEET_DB


def init_kv_table(db_path=None):
    """Create the key/value blob table. Safe to call multiple times."""
    with get_db(db_path) as conn:
        conn.execute('''
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
    logger.info(f"Key/value table ready in {os.path.basename(db_path or FLEET_DB)}")


@contextmanager
def get_db(db_path=None):
    """
    Context manager for sqlite connections.

    Usage:
        with get_db() as conn:
            conn.execute('SELECT ...')

    Args:
        db_path: Path to the sqlite database. Defaults to FLEET_DB.
    """
    if db_path is None:
        db_path = FLEET_DB
    conn = sqlite3.connect(db_path)
    conn.execute('PRAGMA journal_mode=WAL')
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
