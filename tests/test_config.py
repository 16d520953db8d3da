from pathlib import Path

import pytest

from savetoink.config import Config, ConfigModel, load_config, save_config
from savetoink.db import InMemoryArticleStore, create_article_store
from savetoink.db.connection import DatabaseConfig


def test_defaults() -> None:
    config = ConfigModel()

    assert config.account == "savetoink"
    assert config.storage.backend == "postgres"
    assert config.storage.delete_batch_size == 25
    assert config.storage.pagination.default_page_size == 20
    assert config.storage.pagination.max_page_size == 20
    assert config.email.enabled is False
    assert config.email.api_key_env == "MAILJET_API_KEY"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.yaml"
    save_config(ConfigModel(account="reader", storage={"backend": "memory"}), path)

    loaded = load_config(path)

    assert loaded.account == "reader"
    assert loaded.storage.backend == "memory"


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path).account == "savetoink"


def test_load_rejects_invalid_yaml_and_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"

    path.write_text("account: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)

    path.write_text("storage:\n  delete_batch_size: 0\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_secrets_resolve_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_DB_PASSWORD", "s3cret")
    monkeypatch.setenv("MAILJET_API_KEY", "key")
    monkeypatch.setenv("MAILJET_API_SECRET", "secret")
    model = ConfigModel(postgres={"password_env": "TEST_DB_PASSWORD"})
    config = Config(model=model)

    assert config.get_db_config()["password"] == "s3cret"
    email = config.get_email_config()
    assert email["api_key"] == "key"
    assert email["api_secret"] == "secret"


def test_explicit_email_secret_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAILJET_API_KEY", "from-env")
    config = Config(model=ConfigModel(email={"api_key": "from-file"}))

    assert config.get_email_config()["api_key"] == "from-file"


def test_missing_email_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MAILJET_API_KEY", raising=False)
    monkeypatch.delenv("MAILJET_API_SECRET", raising=False)
    config = Config(model=ConfigModel(email={"destination_email": "reader@kindle.com"}))

    missing = config.missing_email_settings()

    assert "email.sender_email" in missing
    assert "email.destination_email" not in missing
    assert len(missing) == 3


def test_connection_string_carries_deadlines() -> None:
    conninfo = DatabaseConfig(
        {"host": "db", "database": "ink", "user": "ink", "connect_timeout": 5, "statement_timeout_ms": 2500}
    ).connection_string

    assert "connect_timeout=5" in conninfo
    assert "statement_timeout=2500" in conninfo
    assert "dbname=ink" in conninfo


def test_store_factory_selects_backend() -> None:
    memory = create_article_store(Config(model=ConfigModel(storage={"backend": "memory"})))
    assert isinstance(memory, InMemoryArticleStore)

    with pytest.raises(ValueError, match="Unknown storage backend"):
        create_article_store(Config(model=ConfigModel(storage={"backend": "dynamo"})))
