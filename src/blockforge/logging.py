"""Logging configuration for Blockforge.

Uses Python's standard logging module with support for:
- File logging via config or the BLOCKFORGE_LOG environment variable
- Verbosity levels: error(0), warning(1), info(2), verbose(3), trace(4)
- Stderr output only when attached to a real console

Each area logs to its own child of the ``blockforge`` logger (see COMPONENTS).
Mutation commits are logged at debug, no-op mutations at trace. Pointer-move
resolution never logs above trace since it runs on every drag event, so a
config like ``components: {dragdrop: TRACE}`` turns on drag tracing alone.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blockforge.config.schema import LoggingConfig

# Custom log levels
TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("blockforge")

LOG_ENV_VAR = "BLOCKFORGE_LOG"

# Child loggers, one per package area
COMPONENTS = ("session", "history", "dragdrop", "storage", "config")

_initialized = False

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_MAP = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: VERBOSE,
    4: TRACE,
}


class _LowercaseLevelFormatter(logging.Formatter):
    """Formatter that emits lowercase level names."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective log level from a LoggingConfig.

    ``verbose`` wins over ``level``; unknown names fall back to INFO.
    """
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY_MAP.get(config.verbose, TRACE)
    if config.level:
        return _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Initialize logging based on configuration.

    Call this once at startup. Subsequent calls are no-ops.

    Args:
        config: Optional LoggingConfig with level, verbose, file, and
            per-component level settings.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = resolve_level(config)
    logger.setLevel(log_level)
    component_levels = _apply_component_levels(config)
    # Handlers must pass records from a component set below the base level
    handler_level = min([log_level, *component_levels.values()])

    # Format: HH:MM:SS level: message
    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get(LOG_ENV_VAR)

    if log_path:
        log_path = os.path.expanduser(log_path)
        try:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            if sys.stderr.isatty():
                print(f"[blockforge] Failed to open log file: {e}", file=sys.stderr)
                _add_stderr_handler(formatter, handler_level)
            return
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    elif sys.stderr.isatty():
        _add_stderr_handler(formatter, handler_level)


def _apply_component_levels(config: LoggingConfig | None) -> dict[str, int]:
    """Set levels on the component child loggers.

    Components without an override are reset to NOTSET so they follow the
    base logger. Names outside COMPONENTS are ignored with a warning.
    """
    overrides = dict(config.components) if config else {}
    levels: dict[str, int] = {}
    for name in COMPONENTS:
        child = logger.getChild(name)
        level_name = overrides.pop(name, None)
        if level_name is None:
            child.setLevel(logging.NOTSET)
            continue
        level = _LEVEL_MAP.get(level_name.upper())
        if level is None:
            logger.warning("Unknown log level %r for component %s", level_name, name)
            child.setLevel(logging.NOTSET)
            continue
        child.setLevel(level)
        levels[name] = level
    for name in overrides:
        logger.warning("Unknown logging component %r, expected one of %s", name, ", ".join(COMPONENTS))
    return levels


def _add_stderr_handler(formatter: logging.Formatter, level: int = logging.DEBUG) -> None:
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Optional child logger name, normally one of COMPONENTS.
              If None, returns the root blockforge logger.
    """
    if name:
        return logger.getChild(name)
    return logger
