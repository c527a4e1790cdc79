"""Logging configuration for Wild Current.

Narration owns stdout, so log events go to stderr or to a file. Each turn
binds the game clock and the player's room into the structlog context, and
every event logged while that turn runs carries them.
"""

import sys
from pathlib import Path
from typing import Any, TextIO

import structlog

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def _level_to_int(level: str) -> int:
    return _LEVELS.get(level.upper(), 30)


def _open_stream(log_file: Path | None) -> TextIO:
    if log_file:
        return open(log_file, "a", encoding="utf-8")
    return sys.stderr


def configure_logging(
    log_level: str = "WARNING",
    log_file: Path | None = None,
    json_logs: bool = False,
) -> None:
    """Configure structured logging for the game."""
    output_stream = _open_stream(log_file)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"
        ),
    ]

    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output_stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output_stream),
        cache_logger_on_first_use=True,
    )


def bind_turn(day: int, hour: int, room: str) -> None:
    """Replace the per-turn context with the current clock and location."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(day=day, hour=hour, room=room)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)
