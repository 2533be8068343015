"""Logging for wqkit: the STAGE level and the stderr handler used by the CLI.

Workflow stages log at STAGE (25), between INFO and WARNING, with their
measurements attached as structured fields (`logger.log(STAGE_LEVEL, msg,
samples=...)`). The package is disabled on import; `enable_logging` turns it
on and adds a stderr handler that renders those fields after the message.

Note:
    Importing this module removes loguru's default handler (ID 0) so records
    are not printed twice once `enable_logging` adds its own.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, Final, Literal, TextIO

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

STAGE_LEVEL: Final[str] = "STAGE"
STAGE_LEVEL_NUMBER: Final[int] = 25


def _register_stage_level() -> None:
    """Register STAGE with loguru, warning if it exists with another number."""
    try:
        existing_level = logger.level(STAGE_LEVEL)
    except ValueError:
        logger.level(STAGE_LEVEL, no=STAGE_LEVEL_NUMBER, icon="💧")
    else:
        if existing_level.no != STAGE_LEVEL_NUMBER:
            msg = f"STAGE level already registered with numeric value {existing_level.no}, expected {STAGE_LEVEL_NUMBER}"
            warnings.warn(msg, stacklevel=2)


_register_stage_level()

type LogLevel = Literal["TRACE", "DEBUG", "INFO", "STAGE", "WARNING", "ERROR", "CRITICAL"]
type LogFormat = Literal["short", "full"]

LOG_LEVELS: Final[tuple[str, ...]] = ("TRACE", "DEBUG", "INFO", "STAGE", "WARNING", "ERROR", "CRITICAL")

_LOCATIONS: Final[dict[str, str]] = {
    "short": "<cyan>{function}</cyan>",
    "full": "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
}

# Handler ids added by `enable_logging` and not yet released.
_handler_ids: set[int] = set()
_handler_lock = threading.Lock()


class LoggingHandle:
    """A stderr handler added by `enable_logging`.

    Releasing the last open handle disables the package logger again, so
    nested or overlapping `with enable_logging():` blocks behave as expected.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     run_workflow(settings)
    """

    def __init__(self, handler_id: int) -> None:
        """Track `handler_id` until the handle is released.

        Args:
            handler_id (int): The loguru handler id returned by `logger.add`.
        """
        self.handler_id: int | None = handler_id
        with _handler_lock:
            _handler_ids.add(handler_id)

    def disable(self) -> None:
        """Remove the handler; disable package logging if no handles remain.

        Calling this more than once is a no-op.
        """
        with _handler_lock:
            if self.handler_id is None:
                return
            _handler_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not _handler_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()


def enable_logging(
    *,
    level: LogLevel = STAGE_LEVEL,
    log_format: LogFormat = "short",
    sink: TextIO | None = None,
) -> LoggingHandle:
    """Show wqkit log records on stderr.

    Each line carries the time, level, source location and message, followed
    by the record's structured fields, e.g.
    `... | STAGE    | train_model - Training finished | samples=8 trees=100`.

    Args:
        level (LogLevel): Minimum level shown. Defaults to "STAGE", one line
            per workflow stage. "DEBUG" adds scaling ranges and split details.
        log_format (LogFormat): "short" (default) names only the function;
            "full" shows module:function:line.
        sink (TextIO | None): Stream to write to. Defaults to `sys.stderr` as
            it is when this function is called.

    Returns:
        LoggingHandle: Releases the handler on `disable()` or on leaving a
            `with` block.
    """
    logger.enable(PACKAGE_NAME)
    location = _LOCATIONS[log_format]

    def _format(record: Record) -> str:
        fields = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
        return (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
            f"{location} - <level>{{message}}</level>"
            + (f" | {fields}" if fields else "")
            + "\n{exception}"
        )

    handler_id = logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        filter=_is_wqkit_record,
        format=_format,
    )
    return LoggingHandle(handler_id)


def _is_wqkit_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
