import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

import contract
from config import settings

# Make sure .env is loaded before the environment is read below.
load_dotenv()

logger = logging.getLogger(__name__)

SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {contract.TABLE_NAME} (
        {contract.COLUMN_ID} INTEGER PRIMARY KEY AUTOINCREMENT,
        {contract.COLUMN_NAME} TEXT NOT NULL,
        {contract.COLUMN_AUTHOR} TEXT NOT NULL,
        {contract.COLUMN_PRICE} INTEGER NOT NULL DEFAULT 0,
        {contract.COLUMN_QUANTITY} INTEGER NOT NULL DEFAULT 0,
        {contract.COLUMN_SUPPLIER_NAME} TEXT NOT NULL,
        {contract.COLUMN_SUPPLIER_PHONE} TEXT NOT NULL
    )
"""


def get_database_file() -> str:
    """Database file to use.

    Priority:
    1) BOOKSTORE_DB_FILE, read at call time so tests can switch files
    2) settings.database_file
    """
    return os.environ.get("BOOKSTORE_DB_FILE") or settings.database_file


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection to the SQLite database with rows addressable by column name."""
    conn = sqlite3.connect(db_file or get_database_file())
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(db_file: Optional[str] = None) -> None:
    """Create the books table if it does not exist yet."""
    path = db_file or get_database_file()
    parent = Path(path).parent
    if str(parent) not in ("", "."):
        parent.mkdir(parents=True, exist_ok=True)

    conn = get_db_connection(path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    logger.info("Bookstore database ready at %s", path)


def initialize_database(db_file: Optional[str] = None) -> None:
    """Initialize the database, creating tables if needed."""
    create_tables(db_file)
