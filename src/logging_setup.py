"""Logging setup for spamscope.

Builds console and rotating file handlers from the "logging" section of
config.json. Every line passes through a formatter that masks the values of
configured secret environment variables (bot token, API hash).
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, List, Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MASK = "***"
DEFAULT_LOG_PATH = "logs/spamscope.log"

# Third-party loggers kept at WARNING or above; Telethon is chatty at INFO.
NOISY_LOGGERS = ("telethon",)


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that replaces known secret values with a mask."""

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first, so a secret that contains another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        for secret in self._secrets:
            text = text.replace(secret, MASK)
        return text


def secret_values(redact: Mapping, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """Resolve the env var names listed under redact.patterns to their values."""

    if not redact.get("enabled", False):
        return []
    environ = os.environ if environ is None else environ
    return [environ[name] for name in redact.get("patterns", []) if environ.get(name)]


def _file_handler(file_cfg: Mapping, project_root: str) -> RotatingFileHandler:
    path = file_cfg.get("path", DEFAULT_LOG_PATH)
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(
    config: Mapping,
    project_root: str,
    environ: Optional[Mapping[str, str]] = None,
) -> List[logging.Handler]:
    """Create the configured handlers, all sharing one masking formatter."""

    formatter = SecretMaskingFormatter(secret_values(config.get("redact", {}), environ))
    handlers: List[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def level_from(config: Mapping) -> int:
    level = logging.getLevelName(str(config.get("level", "INFO")).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: Optional[Mapping], project_root: str) -> None:
    """Install handlers on the root logger; a disabled section is a no-op."""

    if not config or not config.get("enabled", False):
        return
    handlers = build_handlers(config, project_root)
    if not handlers:
        return

    level = level_from(config)
    for handler in handlers:
        handler.setLevel(level)
    logging.basicConfig(level=level, handlers=handlers)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
