"""Logging helpers for spamtree.

The package logs through loguru and is disabled by default (see
``spamtree/__init__.py``).  :func:`enable_logging` switches it on for the
lifetime of the returned handle.
"""

from __future__ import annotations

import contextlib
import sys
import threading
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["short", "full"]

_FORMATS: Final[dict[str, str]] = {
    "short": (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{function}</cyan> - <level>{message}</level>"
    ),
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    ),
}


class LoggingHandle:
    """Owns one loguru handler added by :func:`enable_logging`.

    Call :meth:`disable` (or leave the ``with`` block) to remove the handler.
    When the last live handle goes away the package logger is disabled again.
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
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


def enable_logging(*, level: LogLevel = "INFO", log_format: LogFormat = "short", sink=None) -> LoggingHandle:
    """Route spamtree log records to ``sink`` (stderr by default).

    Parameters
    ----------
    level : str, default="INFO"
        Minimum level.  ``"TRACE"`` shows every split the builder makes.
    log_format : {"short", "full"}, default="short"
        ``"full"`` adds the module and line number to each message.
    sink : optional
        Any loguru sink; defaults to ``sys.stderr``.

    Returns
    -------
    LoggingHandle

    Raises
    ------
    ConfigurationError
        If ``log_format`` or ``level`` is not recognised.
    """
    if log_format not in _FORMATS:
        raise ConfigurationError(f"log_format must be one of {sorted(_FORMATS)}, got {log_format!r}")
    try:
        handler_id = logger.add(
            sink if sink is not None else sys.stderr,
            level=level,
            filter=_is_spamtree_record,
            format=_FORMATS[log_format],
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid log level {level!r}: {exc}") from exc
    logger.enable(PACKAGE_NAME)
    return LoggingHandle(handler_id)


def _is_spamtree_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
