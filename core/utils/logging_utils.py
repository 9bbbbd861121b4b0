"""
DesignOS: Logging helpers

One rotating log file per component (access, session, api) plus stderr.
Loggers are configured once and reused.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

_LOG_DIR = Path(os.getenv("DESIGNOS_LOG_DIR", "logs"))
_LOG_FILE = os.getenv("DESIGNOS_LOG_FILE")
_FALLBACK_LOG_NAME = "designos.log"

_COMPONENTS = {
    # component: (default file, env override)
    "access": ("access.log", "DESIGNOS_ACCESS_LOG_FILE"),
    "session": ("session.log", "DESIGNOS_SESSION_LOG_FILE"),
    "api": ("api.log", "DESIGNOS_API_LOG_FILE"),
}


def _env_level(default: int) -> int:
    raw = (os.getenv("DESIGNOS_LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def _file_logging_enabled() -> bool:
    return os.getenv("DESIGNOS_LOG_TO_FILE", "true").lower() in ("1", "true", "yes")


def resolve_log_path(component: Optional[str] = None, log_file: Optional[str] = None) -> Path:
    if log_file:
        return Path(log_file)

    entry = _COMPONENTS.get(component or "")
    if entry:
        filename, env_key = entry
        override = os.getenv(env_key)
        if override:
            return Path(override)
        return _LOG_DIR / filename

    if _LOG_FILE:
        return Path(_LOG_FILE)
    return _LOG_DIR / _FALLBACK_LOG_NAME


def _build_handlers(log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    handlers: List[logging.Handler] = [stream_handler]

    if not _file_logging_enabled():
        return handlers

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError:
        logging.getLogger(__name__).exception(
            "Failed to initialize file logging at %s", log_path
        )

    return handlers


def get_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    logger = logging.getLogger(name)
    level = _env_level(level)

    if getattr(logger, "_designos_configured", False):
        logger.setLevel(level)
        return logger

    logger.setLevel(level)
    logger.propagate = False

    for handler in _build_handlers(resolve_log_path(log_file=log_file)):
        logger.addHandler(handler)

    logger._designos_configured = True
    return logger


def get_component_logger(
    name: str,
    component: Optional[str] = None,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    resolved_path = resolve_log_path(component, log_file)
    return get_logger(name, level=level, log_file=str(resolved_path))


def attach_app_logger(app, component: str = "api") -> logging.Logger:
    """
    Route Flask's own logger through the component handlers.
    """

    app_logger = app.logger
    if getattr(app_logger, "_designos_configured", False):
        return app_logger

    app_logger.handlers.clear()
    for handler in _build_handlers(resolve_log_path(component)):
        app_logger.addHandler(handler)

    app_logger.setLevel(_env_level(logging.INFO))
    app_logger._designos_configured = True
    return app_logger
