"""Article storage on PostgreSQL."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool
from pydantic import ValidationError as ModelValidationError

from ..config import StorageConfig
from ..errors import BackendUnavailableError, MarshalError, NotFoundError
from ..models import Article, ArticlePage, DeliveryStatus
from .base import ArticleStore, Clock
from .pagination import build_page, page_bounds

logger = logging.getLogger(__name__)

ARTICLE_COLUMNS = (
    "account",
    "id",
    "url",
    "title",
    "author",
    "content",
    "excerpt",
    "image_url",
    "source_domain",
    "site_name",
    "content_type",
    "language",
    "word_count",
    "reading_time_minutes",
    "published_at",
    "delivery_status",
    "delivery_attempt_count",
    "last_delivery_attempt",
    "delivery_error",
    "delivered_from",
    "delivered_to",
    "delivered_email_uuid",
    "delivered_by",
    "created_at",
    "updated_at",
)

SUMMARY_COLUMNS = tuple(column for column in ARTICLE_COLUMNS if column != "content")

# Never overwritten by an upsert of an existing key
_PRESERVED_ON_CONFLICT = ("account", "id", "created_at")

_RETRYABLE_ERRORS = (psycopg.OperationalError, psycopg.InterfaceError)


def _column_list(columns: tuple) -> sql.Composable:
    return sql.SQL(", ").join(sql.Identifier(column) for column in columns)


class PostgresArticleStore(ArticleStore):
    """Article store backed by a PostgreSQL table."""

    def __init__(
        self,
        pool: ConnectionPool,
        config: Optional[StorageConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize the store with a connection pool, closed by close()."""
        super().__init__(config, clock)
        self.pool = pool
        self._table = sql.Identifier(self.config.table_name)

    def close(self) -> None:
        """Close the connection pool."""
        self.pool.close()

    @contextmanager
    def _translate_errors(self, operation: str) -> Generator[None, None, None]:
        """Map driver errors onto the store error taxonomy."""
        try:
            yield
        except _RETRYABLE_ERRORS as e:
            raise BackendUnavailableError(f"failed to {operation}: {e}") from e
        except psycopg.DataError as e:
            raise MarshalError(f"failed to {operation}: {e}") from e

    def _to_row(self, article: Article) -> Dict[str, Any]:
        """Encode an article as query parameters."""
        row = article.model_dump(include=set(ARTICLE_COLUMNS))
        try:
            row["delivery_status"] = DeliveryStatus(article.delivery_status).value
        except ValueError as e:
            raise MarshalError(f"failed to marshal article {article.id}: {e}") from e
        return row

    def _from_row(self, row: Optional[Dict[str, Any]]) -> Article:
        """Decode a database row into an article."""
        if row is None:
            raise MarshalError("expected a row, got none")
        try:
            return Article.model_validate(dict(row))
        except ModelValidationError as e:
            raise MarshalError(f"failed to unmarshal article: {e}") from e

    def store(self, article: Article) -> Article:
        """
        Upsert an article in a single statement.

        created_at is left out of the conflict update, so the first value
        written for a key survives every later write.
        """
        prepared = self.prepare_for_write(article)
        row = self._to_row(prepared)

        updates = sql.SQL(", ").join(
            sql.SQL("{column} = EXCLUDED.{column}").format(column=sql.Identifier(column))
            for column in ARTICLE_COLUMNS
            if column not in _PRESERVED_ON_CONFLICT
        )
        query = sql.SQL(
            """
            INSERT INTO {table} ({columns})
            VALUES ({values})
            ON CONFLICT (account, id) DO UPDATE SET {updates}
            RETURNING {columns}
            """
        ).format(
            table=self._table,
            columns=_column_list(ARTICLE_COLUMNS),
            values=sql.SQL(", ").join(sql.Placeholder(column) for column in ARTICLE_COLUMNS),
            updates=updates,
        )

        with self._translate_errors("store article"):
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, row)
                    stored = cur.fetchone()

        logger.debug("Stored article %s for account %s", prepared.id, prepared.account)
        return self._from_row(stored)

    def get_by_account_and_id(self, account: str, article_id: str) -> Article:
        """Get a full article, content included."""
        query = sql.SQL(
            "SELECT {columns} FROM {table} WHERE account = %s AND id = %s"
        ).format(columns=_column_list(ARTICLE_COLUMNS), table=self._table)

        with self._translate_errors("get article"):
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (account, article_id))
                    row = cur.fetchone()

        if row is None:
            raise NotFoundError(f"article {article_id} not found")
        return self._from_row(row)

    def list_by_account(
        self,
        account: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> ArticlePage:
        """List article summaries, newest first, with an exact total."""
        page, page_size, offset = page_bounds(page, page_size, self.config.pagination)

        count_query = sql.SQL("SELECT COUNT(*) AS total FROM {table} WHERE account = %s").format(
            table=self._table
        )
        page_query = sql.SQL(
            """
            SELECT {columns} FROM {table}
            WHERE account = %s
            ORDER BY created_at DESC, id ASC
            LIMIT %s OFFSET %s
            """
        ).format(columns=_column_list(SUMMARY_COLUMNS), table=self._table)

        with self._translate_errors("list articles"):
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(count_query, (account,))
                    total = cur.fetchone()["total"]
                    cur.execute(page_query, (account, page_size, offset))
                    rows = cur.fetchall()

        summaries = [self._from_row(row) for row in rows]
        return build_page(summaries, page, page_size, total)

    def delete_by_account_and_id(self, account: str, article_id: str) -> int:
        """Delete one article; a miss or a foreign record deletes nothing."""
        query = sql.SQL("DELETE FROM {table} WHERE account = %s AND id = %s").format(
            table=self._table
        )

        with self._translate_errors("delete article"):
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (account, article_id))
                    return cur.rowcount

    def delete_by_account(self, account: str) -> int:
        """Delete all articles of an account in bounded chunks."""
        query = sql.SQL("SELECT id FROM {table} WHERE account = %s ORDER BY id").format(
            table=self._table
        )

        with self._translate_errors("list article ids"):
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (account,))
                    ids = [row["id"] for row in cur.fetchall()]

        batch_size = self.config.delete_batch_size
        deleted = 0
        for start in range(0, len(ids), batch_size):
            deleted += self._delete_chunk(account, ids[start:start + batch_size])

        logger.info("Deleted %d articles for account %s", deleted, account)
        return deleted

    def _delete_chunk(self, account: str, ids: List[str]) -> int:
        """Delete one chunk in its own transaction, retrying transient failures."""
        query = sql.SQL("DELETE FROM {table} WHERE account = %s AND id = ANY(%s)").format(
            table=self._table
        )

        last_error: Optional[Exception] = None
        for attempt in range(1, self.config.delete_chunk_retries + 1):
            try:
                with self.pool.connection() as conn:
                    with conn.cursor() as cur:
                        cur.execute(query, (account, ids))
                        return cur.rowcount
            except _RETRYABLE_ERRORS as e:
                last_error = e
                logger.warning(
                    "Delete chunk of %d ids failed (attempt %d/%d): %s",
                    len(ids),
                    attempt,
                    self.config.delete_chunk_retries,
                    e,
                )

        raise BackendUnavailableError(
            f"failed to delete {len(ids)} articles for account {account}: {last_error}"
        ) from last_error
