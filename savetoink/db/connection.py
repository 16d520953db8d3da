"""Database connection management."""

import os
from contextlib import contextmanager
from typing import Any, Dict, Generator

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool


class DatabaseConfig:
    """Database configuration."""

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize database config from dict."""
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "savetoink")
        self.user = config.get("user", "savetoink")
        self.connect_timeout = config.get("connect_timeout", 10)
        self.statement_timeout_ms = config.get("statement_timeout_ms", 10000)

        # Handle password from environment variable if specified
        password_env = config.get("password_env")
        if password_env and os.environ.get(password_env):
            self.password = os.environ[password_env]
        else:
            self.password = config.get("password") or ""

    @property
    def connection_string(self) -> str:
        """Get psycopg connection string."""
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=self.connect_timeout,
            options=f"-c statement_timeout={self.statement_timeout_ms}",
        )


def create_connection_pool(
    config: Dict[str, Any],
    min_size: int = 1,
    max_size: int = 10,
) -> ConnectionPool:
    """Create a connection pool; the caller owns it and must close it."""
    db_config = DatabaseConfig(config)
    return ConnectionPool(
        db_config.connection_string,
        min_size=min_size,
        max_size=max_size,
        kwargs={"row_factory": dict_row},
        timeout=float(db_config.connect_timeout),
        open=True,
    )


@contextmanager
def get_connection(config: Dict[str, Any]) -> Generator[psycopg.Connection, None, None]:
    """Open a single database connection outside any pool."""
    db_config = DatabaseConfig(config)
    with psycopg.connect(db_config.connection_string, row_factory=dict_row) as conn:
        yield conn
