import random
import string
import uuid

import pytest

from savetoink.content import article_id_from_url, canonicalize_url
from savetoink.errors import InvalidURLError, ValidationError


def test_canonicalize_drops_query_fragment_and_trailing_slash() -> None:
    assert canonicalize_url("https://example.com/article/123?utm=x#y") == "https://example.com/article/123"
    assert canonicalize_url("https://example.com/article/123/") == "https://example.com/article/123"


def test_canonicalize_keeps_root_path() -> None:
    assert canonicalize_url("https://example.com") == "https://example.com/"
    assert canonicalize_url("https://example.com/") == "https://example.com/"
    assert canonicalize_url("https://example.com/?q=1") == "https://example.com/"


def test_decorated_urls_share_one_id() -> None:
    expected = str(uuid.uuid5(uuid.NAMESPACE_URL, "https://example.com/article/123"))

    assert article_id_from_url("https://example.com/article/123?utm=x#y") == expected
    assert article_id_from_url("https://example.com/article/123/") == expected
    assert article_id_from_url("https://example.com/article/123") == expected


def test_scheme_and_path_distinguish_ids() -> None:
    https_id = article_id_from_url("https://example.com/article/123")

    assert article_id_from_url("http://example.com/article/123") != https_id
    assert article_id_from_url("https://example.com/article/124") != https_id
    assert article_id_from_url("https://other.example.com/article/123") != https_id


def test_id_is_a_version_5_uuid() -> None:
    parsed = uuid.UUID(article_id_from_url("https://example.com/post"))
    assert parsed.version == 5


@pytest.mark.parametrize("raw_url", ["", "example.com/article", "/relative/path", "https://"])
def test_urls_without_scheme_or_host_are_rejected(raw_url: str) -> None:
    with pytest.raises(InvalidURLError, match="must have scheme and host"):
        article_id_from_url(raw_url)


def test_invalid_url_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        canonicalize_url("not a url")
    with pytest.raises(ValueError):
        canonicalize_url("not a url")


def test_userinfo_is_not_part_of_the_identity() -> None:
    assert canonicalize_url("https://user:pw@example.com/a") == "https://example.com/a"
    assert article_id_from_url("https://user:pw@example.com/a") == article_id_from_url("https://example.com/a")
    assert canonicalize_url("https://example.com:8443/a") == "https://example.com:8443/a"


def test_userinfo_without_host_is_rejected() -> None:
    with pytest.raises(InvalidURLError, match="must have scheme and host"):
        canonicalize_url("http://user@/path")


def test_path_is_percent_decoded() -> None:
    assert canonicalize_url("https://example.com/a%20b/") == "https://example.com/a b"
    assert article_id_from_url("https://example.com/a%20b") == article_id_from_url("https://example.com/a b")


def test_distinct_canonical_urls_get_distinct_ids() -> None:
    rng = random.Random(20240101)
    alphabet = string.ascii_lowercase + string.digits
    urls = set()
    while len(urls) < 1000:
        host = "".join(rng.choices(string.ascii_lowercase, k=rng.randint(3, 10)))
        path = "/".join("".join(rng.choices(alphabet, k=rng.randint(1, 8))) for _ in range(rng.randint(1, 3)))
        urls.add(f"{rng.choice(['http', 'https'])}://{host}.example/{path}")

    ids = {article_id_from_url(url) for url in urls}

    assert len({canonicalize_url(url) for url in urls}) == 1000
    assert len(ids) == 1000
