"""
Logging infrastructure for grid_stencils.

Handlers live on the package logger ("grid_stencils") only. Module loggers
below it carry no handlers of their own and hand their records up, so one
configure_logging() call controls the whole library. Loggers requested for
names outside the package (applications, scripts) get their own handlers
with the same settings.

Library modules only emit DEBUG records (halo allocation, buffer
switching, kernel fast path, worker bands). The thread name column
(show_threads=True) tells the mapstencil worker threads apart.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

import colorlog

PACKAGE_LOGGER = "grid_stencils"

_DATEFMT = "%H:%M:%S"

_LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _record_format(include_location: bool, show_threads: bool) -> str:
    columns = ["%(asctime)s", "%(levelname)-8s", "%(name)s"]
    if show_threads:
        columns.append("%(threadName)s")
    fmt = " | ".join(columns) + " | %(message)s"
    if include_location:
        fmt += " (%(filename)s:%(lineno)d)"
    return fmt


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level {level!r}")
    return value


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


class StencilFormatter(logging.Formatter):
    """Pipe-separated record formatter; colour comes from colorlog."""

    def __init__(self, use_colors: bool = False, include_location: bool = False, show_threads: bool = False):
        fmt = _record_format(include_location, show_threads)
        super().__init__(fmt, datefmt=_DATEFMT)
        self.use_colors = use_colors
        self.colored_formatter = (
            colorlog.ColoredFormatter("%(log_color)s" + fmt, datefmt=_DATEFMT, log_colors=_LEVEL_COLORS)
            if use_colors
            else None
        )

    def format(self, record):
        if self.colored_formatter is not None:
            return self.colored_formatter.format(record)
        return super().format(record)


@dataclass(frozen=True)
class LogSettings:
    """Settings applied to every handler-owning logger."""

    level: int = logging.WARNING
    log_file: Path | None = None
    use_colors: bool = True
    include_location: bool = False
    show_threads: bool = False


class StencilLogger:
    """
    Registry of the loggers handed out by get_logger().

    Thread Safety:
        Registration and reconfiguration share one re-entrant lock, so
        get_logger() calls from mapstencil worker threads never attach
        duplicate handlers.
    """

    _lock: ClassVar[threading.RLock] = threading.RLock()
    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    settings: ClassVar[LogSettings] = LogSettings()

    @classmethod
    def configure(
        cls,
        level: str | int = "WARNING",
        log_file: str | Path | None = None,
        use_colors: bool = True,
        include_location: bool = False,
        show_threads: bool = False,
    ) -> LogSettings:
        """
        Replace the global settings and re-apply them to every registered logger.

        Args:
            level: Level name or number
            log_file: Also write plain (uncoloured) records to this file
            use_colors: Colour console output
            include_location: Append file:line to each record
            show_threads: Add the thread name column

        Returns:
            The settings now in effect
        """
        with cls._lock:
            path = Path(log_file) if log_file is not None else None
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
            cls.settings = LogSettings(
                level=_coerce_level(level),
                log_file=path,
                use_colors=use_colors,
                include_location=include_location,
                show_threads=show_threads,
            )
            cls._register(PACKAGE_LOGGER)
            for name, logger in cls._loggers.items():
                cls._apply(name, logger)
            return cls.settings

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        logger = cls._loggers.get(name)
        if logger is not None:
            return logger
        with cls._lock:
            return cls._register(name)

    @classmethod
    def flush(cls):
        """Flush every handler owned by a registered logger."""
        for logger in cls._loggers.values():
            for handler in logger.handlers:
                handler.flush()

    @classmethod
    def _register(cls, name: str) -> logging.Logger:
        if name in cls._loggers:
            return cls._loggers[name]
        if _in_package(name) and name != PACKAGE_LOGGER:
            cls._register(PACKAGE_LOGGER)
        logger = logging.getLogger(name)
        cls._apply(name, logger)
        cls._loggers[name] = logger
        return logger

    @classmethod
    def _apply(cls, name: str, logger: logging.Logger):
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        if _in_package(name) and name != PACKAGE_LOGGER:
            # Level and handlers come from the package logger
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
            return

        settings = cls.settings
        logger.setLevel(settings.level)
        logger.propagate = False

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(
            StencilFormatter(settings.use_colors, settings.include_location, settings.show_threads)
        )
        logger.addHandler(console)

        if settings.log_file is not None:
            file_handler = logging.FileHandler(settings.log_file)
            file_handler.setFormatter(StencilFormatter(False, settings.include_location, settings.show_threads))
            logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger for the calling module.

    Args:
        name: Logger name (if None, uses calling module name)
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", PACKAGE_LOGGER)
        else:
            name = PACKAGE_LOGGER

    return StencilLogger.get_logger(name)


def configure_logging(**kwargs) -> LogSettings:
    """Configure library logging; keyword arguments as in StencilLogger.configure."""
    return StencilLogger.configure(**kwargs)


def configure_development_logging(include_location: bool = True) -> LogSettings:
    """DEBUG records on the console with thread names, e.g. to follow mapstencil bands."""
    settings = configure_logging(level="DEBUG", include_location=include_location, show_threads=True)
    get_logger(PACKAGE_LOGGER).debug("Development logging enabled")
    return settings
