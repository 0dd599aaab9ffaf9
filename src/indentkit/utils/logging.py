"""Logging configuration for indentkit, driven by :class:`Settings`.

Handlers go on the ``indentkit`` package logger rather than the root logger,
so an application embedding the commands keeps its own logging setup.
Nothing is configured unless ``Settings.debug_logging`` or an explicit level
asks for it.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from ..services.settings import Settings

__all__ = ["PACKAGE_LOGGER", "get_log_path", "resolve_level", "setup_logging", "teardown_logging"]

PACKAGE_LOGGER = "indentkit"
LOG_DIR_ENV = "INDENTKIT_LOG_DIR"
_DEFAULT_LOG_DIR = Path.home() / ".indentkit" / "logs"
_LOG_FILENAME = "indentkit.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_installed: list[logging.Handler] = []
_log_path: Path | None = None


def resolve_level(settings: Settings | None = None, level: int | str | None = None) -> int | None:
    """Return the level to log at, or ``None`` when logging stays off.

    An explicit ``level`` (a number or a name such as ``"DEBUG"``) wins;
    otherwise ``settings.debug_logging`` selects ``DEBUG``.
    """

    if level is not None:
        if isinstance(level, str):
            value = logging.getLevelName(level.strip().upper())
            if not isinstance(value, int):
                raise ValueError(f"Unknown log level {level!r}")
            return value
        return int(level)
    if settings is not None and settings.debug_logging:
        return logging.DEBUG
    return None


def setup_logging(
    settings: Settings | None = None,
    *,
    level: int | str | None = None,
    log_dir: Path | str | None = None,
    console: bool = True,
    force: bool = False,
) -> Path | None:
    """Attach a rotating log file (and a stderr stream) to the package logger.

    Returns the log file path, or ``None`` when neither ``settings`` nor
    ``level`` turn logging on. A second call keeps the handlers already in
    place unless ``force`` is set.
    """

    global _log_path
    resolved = resolve_level(settings, level)
    if resolved is None:
        return None
    if _installed and not force:
        return _log_path

    teardown_logging()
    target_dir = Path(log_dir or os.environ.get(LOG_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / _LOG_FILENAME

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in handlers:
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(resolved)

    _installed.extend(handlers)
    _log_path = log_path
    logger.debug("Logging to %s at %s", log_path, logging.getLevelName(resolved))
    return log_path


def teardown_logging() -> None:
    """Detach and close the handlers installed by :func:`setup_logging`."""

    global _log_path
    logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _log_path = None


def get_log_path() -> Path | None:
    """Return the active log file, if logging is configured."""

    return _log_path
