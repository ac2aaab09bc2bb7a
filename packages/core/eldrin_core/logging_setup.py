"""Structured local logging for the installer."""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import ENV_LOG_DIR


_LOGGER_NAME = "eldrin"
_LOG_FILE = "eldrin-install.log"
_EXTRA_FIELDS = ("event", "url", "path", "status", "bytes")


def _config_root() -> Path:
    if platform.system() == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Eldrin"
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Eldrin"
    return Path.home() / ".config" / "eldrin"


def resolve_log_dir(override: Path | None = None) -> Path:
    """Return the log directory without touching the filesystem."""
    env_dir = os.environ.get(ENV_LOG_DIR, "").strip()
    if override is not None:
        return override
    if env_dir:
        return Path(env_dir).expanduser()
    return _config_root() / "logs"


def log_dir(override: Path | None = None) -> Path:
    path = resolve_log_dir(override)
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                value = getattr(record, key)
                payload[key] = str(value) if isinstance(value, Path) else value
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(
    keep_files: int = 7,
    console: bool = False,
    directory: Path | None = None,
) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    try:
        path = log_dir(directory) / _LOG_FILE
        handler: logging.Handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(path),
            when="midnight",
            backupCount=max(2, keep_files),
            encoding="utf-8",
        )
        handler.setFormatter(JsonFormatter())
    except OSError:
        # Read-only home directories are common in CI images and containers.
        handler = logging.NullHandler()
    handler.setLevel(logging.DEBUG)
    logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.DEBUG)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.debug("logging configured", extra={"event": "logging_configured"})
    return logger


def get_logger(component: str | None = None) -> logging.Logger:
    if component:
        return logging.getLogger(f"{_LOGGER_NAME}.{component}")
    return logging.getLogger(_LOGGER_NAME)


def reset_logging() -> None:
    """Detach and close every handler on the ``eldrin`` logger."""
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
