"""Database initialization and schema management."""

import logging
from typing import Any, Dict, List

from psycopg import sql
from psycopg.errors import DatabaseError

from .connection import get_connection

logger = logging.getLogger(__name__)


TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    account TEXT NOT NULL,
    id TEXT NOT NULL,
    url TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    author TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    excerpt TEXT NOT NULL DEFAULT '',
    image_url TEXT NOT NULL DEFAULT '',
    source_domain TEXT NOT NULL DEFAULT '',
    site_name TEXT NOT NULL DEFAULT '',
    content_type TEXT NOT NULL DEFAULT '',
    language TEXT NOT NULL DEFAULT '',
    word_count INTEGER NOT NULL DEFAULT 0,
    reading_time_minutes INTEGER NOT NULL DEFAULT 0,
    published_at TIMESTAMPTZ,
    delivery_status TEXT NOT NULL DEFAULT 'pending'
        CHECK (delivery_status IN ('pending', 'delivering', 'delivered', 'failed')),
    delivery_attempt_count INTEGER NOT NULL DEFAULT 0 CHECK (delivery_attempt_count >= 0),
    last_delivery_attempt TIMESTAMPTZ,
    delivery_error TEXT,
    delivered_from TEXT,
    delivered_to TEXT,
    delivered_email_uuid TEXT,
    delivered_by TEXT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (account, id)
)
"""

# Serves ListByAccount: newest first within one account
INDEX_SQL = """
CREATE INDEX IF NOT EXISTS {index} ON {table} (account, created_at DESC, id)
"""


def schema_statements(table_name: str) -> List[sql.Composed]:
    """Build the DDL statements for an article table."""
    table = sql.Identifier(table_name)
    return [
        sql.SQL(TABLE_SQL).format(table=table),
        sql.SQL(INDEX_SQL).format(
            index=sql.Identifier(f"idx_{table_name}_account_created_at"),
            table=table,
        ),
    ]


def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                result = cur.fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False


def init_database(config: Dict[str, Any], table_name: str = "articles") -> None:
    """Initialize database schema."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                for statement in schema_statements(table_name):
                    cur.execute(statement)
                conn.commit()
                logger.info("Database schema initialized for table %s", table_name)
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
