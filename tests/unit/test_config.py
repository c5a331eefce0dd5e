"""Unit tests for settings and logging configuration."""

import json
import logging
import sys
from pathlib import Path

import pytest

from docchat.adapters.common.exception_handler import log_exception
from docchat.config.logging import JSONExceptionFormatter, setup_logging
from docchat.core.domain.exceptions import LLMRateLimitError
from docchat.config.settings import Settings


@pytest.mark.unit
def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.search_default_limit == 10
    assert settings.memory_max_turns == 15
    assert settings.documents_file == Path("./data") / "documents.json"
    assert settings.chat_history_db.name == "chat_history.db"


@pytest.mark.unit
def test_api_key_sanitized(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "\ufeff  secret-key \n")

    assert Settings(_env_file=None).google_api_key == "secret-key"


@pytest.mark.unit
def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("STREAM_CHUNK_DELAY", "0")

    settings = Settings(_env_file=None)
    settings.ensure_directories()

    assert settings.stream_chunk_delay == 0
    assert (tmp_path / "store").is_dir()


@pytest.mark.unit
def test_json_formatter_includes_exception():
    try:
        raise ValueError("broken")
    except ValueError:
        record = logging.getLogger("docchat.test").makeRecord(
            "docchat.test", logging.ERROR, __file__, 1, "failed %s", ("here",), None
        )
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONExceptionFormatter().format(record))

    assert payload["message"] == "failed here"
    assert payload["exception"]["type"] == "ValueError"
    assert payload["location"]["line"] == 1


@pytest.mark.unit
def test_setup_logging_configures_package_logger(tmp_path):
    log_file = tmp_path / "logs" / "docchat.log"

    logger = setup_logging("debug", log_file=log_file, json_format=True)
    logging.getLogger("docchat.unit").debug("hello")
    for handler in logger.handlers:
        handler.flush()

    assert logger.name == "docchat"
    assert logger.level == logging.DEBUG
    assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])["message"] == "hello"
    setup_logging("INFO")


@pytest.mark.unit
def test_json_log_line_carries_error_payload(tmp_path):
    log_file = tmp_path / "errors.log"
    logger = setup_logging("INFO", log_file=log_file, json_format=True)

    log_exception(LLMRateLimitError("quota exhausted", context={"model": "gemini"}))
    for handler in logger.handlers:
        handler.flush()

    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert entry["message"] == "LLMRateLimitError [DC_LLM_003]: quota exhausted"
    assert entry["error"]["error"]["code"] == "DC_LLM_003"
    assert entry["error"]["context"] == {"model": "gemini"}
    assert entry["exception"]["type"] == "LLMRateLimitError"
    setup_logging("INFO")


@pytest.mark.unit
def test_setup_logging_replaces_handlers():
    setup_logging("INFO")
    logger = setup_logging("WARNING")

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    setup_logging("INFO")
