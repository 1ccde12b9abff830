"""Engine logging on top of femtologging.

Every module obtains its logger with ``get_logger(__name__)`` and emits
through ``emit`` (or one of the per-level shorthands), which applies
percent-style interpolation before handing the record to femtologging.
``configure_logging`` applies the level carried by ``EngineSettings``.

Examples
--------
>>> level = configure_logging(EngineSettings(log_level="debug"))
>>> log_info(get_logger(__name__), "Scored %s entries", 12)
"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

if typ.TYPE_CHECKING:
    from dah.config import EngineSettings


class LogLevel(enum.StrEnum):
    """Levels the engine configures and emits at."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


DEFAULT_LEVEL = LogLevel.INFO

_ALIASES: typ.Final[dict[str, LogLevel]] = {
    "WARN": LogLevel.WARNING,
    "FATAL": LogLevel.CRITICAL,
}


def parse_level(raw: str | None) -> LogLevel | None:
    """Return the level named by ``raw``, or None when it names no level.

    Names are case-insensitive and surrounding whitespace is ignored.
    ``WARN`` and ``FATAL`` are accepted as aliases.
    """
    if raw is None:
        return None
    name = raw.strip().upper()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return LogLevel(name)
    except ValueError:
        return None


def configure_logging(settings: EngineSettings, *, force: bool = False) -> LogLevel:
    """Apply ``settings.log_level`` to femtologging.

    Parameters
    ----------
    settings : EngineSettings
        Settings whose ``log_level`` selects the threshold.
    force : bool, optional
        Replace handlers that are already configured.

    Returns
    -------
    LogLevel
        The level applied. A missing or unknown level applies
        ``DEFAULT_LEVEL``; an unknown one is also reported as a warning.
    """
    requested = settings.log_level
    level = parse_level(requested)
    applied = DEFAULT_LEVEL if level is None else level
    basicConfig(level=applied, force=force)
    if level is None and requested is not None:
        log_warning(
            get_logger(__name__),
            "Unknown log level %r; using %s.",
            requested,
            applied,
        )
    return applied


class _SupportsLog(typ.Protocol):
    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> None: ...


def emit(
    logger: _SupportsLog,
    template: str,
    *args: object,
    level: LogLevel = DEFAULT_LEVEL,
    exc_info: object | None = None,
) -> None:
    """Interpolate ``args`` into ``template`` and log it at ``level``.

    A template without arguments is emitted as is, so literal ``%`` signs
    need no escaping.

    Raises
    ------
    TypeError
        If ``args`` do not match the template's placeholders.
    """
    message = template % args if args else template
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(logger: _SupportsLog, template: str, *args: object) -> None:
    emit(logger, template, *args, level=LogLevel.DEBUG)


def log_info(logger: _SupportsLog, template: str, *args: object) -> None:
    emit(logger, template, *args, level=LogLevel.INFO)


def log_warning(logger: _SupportsLog, template: str, *args: object) -> None:
    emit(logger, template, *args, level=LogLevel.WARNING)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at ERROR, optionally attaching ``exc_info``."""
    emit(logger, template, *args, level=LogLevel.ERROR, exc_info=exc_info)


__all__ = (
    "DEFAULT_LEVEL",
    "LogLevel",
    "configure_logging",
    "emit",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "parse_level",
)
