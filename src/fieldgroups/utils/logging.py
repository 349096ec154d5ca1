"""
Logging helpers for fieldgroups.

Four verbosity levels are supported:

* ``QUIET``   – errors only
* ``NORMAL``  – progress and results
* ``VERBOSE`` – per-group details
* ``DEBUG``   – pool scans and candidate rejections

The level can be set programmatically with :func:`setup_logging` or through the
``FIELDGROUPS_LOG_LEVEL`` environment variable (``quiet``, ``normal``,
``verbose``, ``debug``).
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum

from tqdm import tqdm


class LogLevel(Enum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class Colors:
    """ANSI colour codes for terminal output."""

    GRAY = "\033[90m"
    CYAN = "\033[36m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


class Symbols:
    """Unicode symbols for log messages."""

    CHECK = "✓"
    CROSS = "✗"
    GEAR = "⚙"
    WARNING = "⚠"
    GROUP = "👥"


_LEVEL_MAP = {
    LogLevel.QUIET: logging.ERROR,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


class SimpleFormatter(logging.Formatter):
    """Formatter that colours the whole line according to the record level."""

    COLORS = {
        "DEBUG": Colors.GRAY,
        "INFO": Colors.CYAN,
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
        "CRITICAL": Colors.RED + Colors.BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        return f"{color}{record.getMessage()}{Colors.RESET}"


class GroupsLogger:
    """Central access point for package loggers and the active verbosity."""

    _current_level: LogLevel = LogLevel.NORMAL
    _loggers: dict[str, logging.Logger] = {}

    @classmethod
    def set_level(cls, level: LogLevel) -> None:
        cls._current_level = level
        for logger in cls._loggers.values():
            cls._configure_logger_level(logger, level)

    @classmethod
    def get_level(cls) -> LogLevel:
        return cls._current_level

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            cls._configure_logger_level(logger, cls._current_level)
            cls._loggers[name] = logger
        return cls._loggers[name]

    @classmethod
    def _configure_logger_level(cls, logger: logging.Logger, level: LogLevel) -> None:
        # The CLI exports the effective level so that child loggers created
        # later pick it up as well.
        env_level = os.environ.get("FIELDGROUPS_EFFECTIVE_LOG_LEVEL")
        if env_level:
            try:
                level = LogLevel[env_level]
            except KeyError:
                pass
        logger.setLevel(_LEVEL_MAP.get(level, logging.INFO))

    @classmethod
    def progress(cls, message: str, symbol: str = Symbols.GEAR) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("fieldgroups.progress").info(f"{symbol} {message}")

    @classmethod
    def success(cls, message: str, symbol: str = Symbols.CHECK) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("fieldgroups.success").info(
                f"{Colors.GREEN}{symbol} {message}{Colors.RESET}"
            )

    @classmethod
    def detail(cls, message: str, prefix: str = "  ") -> None:
        if cls._current_level.value >= LogLevel.VERBOSE.value:
            cls.get_logger("fieldgroups.detail").info(f"{prefix} {message}")

    @classmethod
    def debug(cls, message: str, logger_name: str = "fieldgroups.debug") -> None:
        if cls._current_level.value >= LogLevel.DEBUG.value:
            cls.get_logger(logger_name).debug(message)

    @classmethod
    def warning(cls, message: str, symbol: str = Symbols.WARNING) -> None:
        if cls._current_level.value >= LogLevel.NORMAL.value:
            cls.get_logger("fieldgroups.warning").warning(f"{symbol} {message}")

    @classmethod
    def error(cls, message: str, symbol: str = Symbols.CROSS) -> None:
        cls.get_logger("fieldgroups.error").error(f"{symbol} {message}")


def suppress_third_party_logs() -> None:
    """Keep numexpr, loaded by pandas, below INFO."""
    logging.getLogger("numexpr").setLevel(logging.WARNING)


def setup_logging(level: LogLevel | None = None) -> None:
    """Install the coloured console handler and set the active level."""
    if level is None:
        env_level = os.environ.get("FIELDGROUPS_LOG_LEVEL", "").lower()
        level = {
            "quiet": LogLevel.QUIET,
            "verbose": LogLevel.VERBOSE,
            "debug": LogLevel.DEBUG,
        }.get(env_level, LogLevel.NORMAL)

    GroupsLogger.set_level(level)
    os.environ["FIELDGROUPS_EFFECTIVE_LOG_LEVEL"] = level.name

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SimpleFormatter())
    if level == LogLevel.QUIET:
        handler.setLevel(logging.ERROR)
    elif level == LogLevel.DEBUG:
        handler.setLevel(logging.DEBUG)
    else:
        handler.setLevel(logging.INFO)

    root.addHandler(handler)
    root.setLevel(handler.level)
    suppress_third_party_logs()


class ProgressTracker:
    """Step-wise progress bar; silent in QUIET mode."""

    def __init__(self, steps: list[str]):
        self.steps = steps
        self.current = 0
        self.show_progress = GroupsLogger.get_level() != LogLevel.QUIET
        self.pbar = None
        if self.show_progress:
            self.pbar = tqdm(
                total=len(steps),
                desc=f"{Colors.BOLD}Grouping{Colors.RESET}",
                bar_format="{desc}: {percentage:3.0f}%|{bar:30}| {n_fmt}/{total_fmt}",
            )

    def advance(self, message: str | None = None, status: str = "success") -> None:
        if self.pbar is not None:
            if message:
                color = {
                    "success": Colors.GREEN,
                    "warning": Colors.YELLOW,
                    "error": Colors.RED,
                }.get(status, Colors.CYAN)
                self.pbar.write(f"{color}{Symbols.CHECK} {message}{Colors.RESET}")
            self.pbar.update(1)
        self.current += 1

    def close(self, success: bool = True) -> None:
        if self.pbar is not None:
            if success:
                self.pbar.write(f"{Colors.GREEN}{Symbols.CHECK} Grouping completed{Colors.RESET}")
            self.pbar.close()


def log_progress(message: str) -> None:
    GroupsLogger.progress(message, Symbols.GEAR)


def log_success(message: str) -> None:
    GroupsLogger.success(message, Symbols.CHECK)


def log_detail(message: str, prefix: str = "  ") -> None:
    GroupsLogger.detail(message, prefix)


def log_warning(message: str) -> None:
    GroupsLogger.warning(message, Symbols.WARNING)


def log_error(message: str) -> None:
    GroupsLogger.error(message, Symbols.CROSS)


def log_debug(message: str, logger_name: str = "fieldgroups.debug") -> None:
    GroupsLogger.debug(message, logger_name)
