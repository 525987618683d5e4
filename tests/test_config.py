import json
import logging

import pytest
import structlog
from pydantic import ValidationError

from model_expires.core.config import Settings
from model_expires.core.logging import configure_logging, get_logger


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = Settings()

    assert settings.database_url.startswith("sqlite+aiosqlite")
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"
    assert (tmp_path / "data").is_dir()


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MODEL_EXPIRES_LOG_LEVEL", "debug")
    monkeypatch.setenv("MODEL_EXPIRES_DATABASE_POOL_SIZE", "7")

    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.database_pool_size == 7


def test_rejects_unknown_log_level(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


@pytest.fixture
def package_logger():
    package_logger = logging.getLogger("model_expires")
    yield package_logger
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    structlog.reset_defaults()


def test_configure_logging_writes_json_file(tmp_path, monkeypatch, package_logger):
    monkeypatch.chdir(tmp_path)
    log_file = tmp_path / "logs" / "app.log"
    configure_logging(Settings(log_file=str(log_file), log_format="json"))

    get_logger("model_expires.tests").info("hello", answer=42)

    event = json.loads(log_file.read_text().splitlines()[-1])
    assert event["event"] == "hello"
    assert event["answer"] == 42
    assert event["level"] == "info"
    assert event["logger"] == "model_expires.tests"


def test_configure_logging_leaves_root_logger_alone(tmp_path, monkeypatch, package_logger):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    root_handlers = list(root.handlers)
    root_level = root.level

    configure_logging(Settings(log_level="warning", log_format="console"))
    configure_logging(Settings(log_level="debug", log_format="console"))

    assert root.handlers == root_handlers
    assert root.level == root_level
    assert package_logger.level == logging.DEBUG
    assert len([h for h in package_logger.handlers if h.get_name() == "model_expires"]) == 1
