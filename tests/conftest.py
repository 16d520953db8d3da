from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

import pytest

from savetoink.db import InMemoryArticleStore
from savetoink.models import Article


class SteppingClock:
    """Clock advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock: SteppingClock) -> Iterator[InMemoryArticleStore]:
    memory_store = InMemoryArticleStore(clock=clock)
    yield memory_store
    memory_store.close()


@pytest.fixture
def make_article() -> Callable[..., Article]:
    def _make(url: str = "https://example.com/article/123", account: str = "alice", **fields) -> Article:
        article = Article.for_url(url, account)
        return article.model_copy(update=fields) if fields else article

    return _make
