"""Article persistence for savetoink."""

from ..config import Config
from .articles import PostgresArticleStore
from .base import ArticleStore
from .connection import create_connection_pool, get_connection
from .init import init_database, validate_connection
from .memory import InMemoryArticleStore


def create_article_store(config: Config) -> ArticleStore:
    """Build the article store selected by ``storage.backend``."""
    storage = config.config.storage
    if storage.backend == "memory":
        return InMemoryArticleStore(storage)
    if storage.backend == "postgres":
        pool = create_connection_pool(config.get_db_config())
        return PostgresArticleStore(pool, storage)
    raise ValueError(f"Unknown storage backend: {storage.backend}")


__all__ = [
    "ArticleStore",
    "InMemoryArticleStore",
    "PostgresArticleStore",
    "create_article_store",
    "create_connection_pool",
    "get_connection",
    "init_database",
    "validate_connection",
]
