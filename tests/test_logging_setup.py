from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from logging_setup import SecretMaskingFormatter, build_handlers, level_from, secret_values


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("spamscope", logging.INFO, __file__, 1, message, None, None)


def test_formatter_masks_secrets_longest_first() -> None:
    formatter = SecretMaskingFormatter(["abc", "abcdef", ""], fmt="%(message)s")
    assert formatter.format(_record("token abcdef and abc")) == "token *** and ***"


def test_secret_values_reads_named_env_vars() -> None:
    redact = {"enabled": True, "patterns": ["BOT_TOKEN", "API_HASH", "MISSING"]}
    environ = {"BOT_TOKEN": "123:xyz", "API_HASH": ""}
    assert secret_values(redact, environ) == ["123:xyz"]
    assert secret_values({"enabled": False, "patterns": ["BOT_TOKEN"]}, environ) == []


def test_build_handlers_console_and_file(tmp_path) -> None:
    config = {
        "console": True,
        "file": {"enabled": True, "path": "logs/spamscope.log", "max_bytes": 1024, "backup_count": 2},
        "redact": {"enabled": True, "patterns": ["BOT_TOKEN"]},
    }
    handlers = build_handlers(config, str(tmp_path), environ={"BOT_TOKEN": "secret-token"})
    try:
        assert len(handlers) == 2
        file_handler = handlers[1]
        assert isinstance(file_handler, RotatingFileHandler)
        assert file_handler.maxBytes == 1024
        assert (tmp_path / "logs").is_dir()
        assert file_handler.formatter.format(_record("using secret-token")).endswith("using ***")
    finally:
        for handler in handlers:
            handler.close()


def test_level_from_falls_back_to_info() -> None:
    assert level_from({"level": "debug"}) == logging.DEBUG
    assert level_from({"level": "chatty"}) == logging.INFO
    assert level_from({}) == logging.INFO
