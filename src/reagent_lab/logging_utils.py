"""Logging setup and error reporting for the reagent-lab CLI."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, Optional, TypeVar

from reagent_lab.errors import ReagentLabError

DEFAULT_LOGGER_NAME = "reagent_lab"
DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_T = TypeVar("_T")


def parse_level(value: Optional[str | int]) -> int:
    if value is None:
        return DEFAULT_LOG_LEVEL
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ReagentLabError(f"Unknown log level: {value!r}")
    return level


def configure_logging(
    level: int = DEFAULT_LOG_LEVEL,
    *,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> logging.Logger:
    logging.basicConfig(level=level, format=fmt)
    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    logger.setLevel(level)
    return logger


def set_level(logger: logging.Logger, level: int) -> None:
    logging.getLogger().setLevel(level)
    logger.setLevel(level)


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
) -> str:
    """Log the user-facing message; context and traceback go to debug.

    With ``show_traceback`` the context (product, reagent, component, pivot)
    and the traceback are logged at error level instead.
    """
    if isinstance(exc, ReagentLabError):
        user_message = exc.user_message
        detail = exc.log_message()
    else:
        user_message = f"Unexpected error: {exc}"
        detail = repr(exc)
    logger.error(user_message)
    detail_level = logging.ERROR if show_traceback else logging.DEBUG
    logger.log(detail_level, "Error detail: %s", detail)
    logger.log(detail_level, "Detailed traceback:", exc_info=exc)
    return user_message


def run_with_error_handling(
    func: Callable[..., _T],
    *args: Any,
    logger: logging.Logger,
    **kwargs: Any,
) -> _T:
    """Run ``func``; anything escaping it is logged with its traceback."""
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        log_exception(logger, exc, show_traceback=True)
        raise


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "configure_logging",
    "log_exception",
    "parse_level",
    "run_with_error_handling",
    "set_level",
]
