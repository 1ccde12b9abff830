"""Environment-derived runtime settings.

The engine reads no configuration files. The handful of runtime knobs come
from environment variables and are parsed once into ``EngineSettings``.
Invalid values fall back to defaults rather than failing.

Examples
--------
>>> settings = settings_from_environment({"DAH_LOG_LEVEL": "debug"})
>>> settings.log_level
'debug'
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from dah._coercion import coerce_positive_float

if typ.TYPE_CHECKING:
    import collections.abc as cabc

LOG_LEVEL_ENV = "DAH_LOG_LEVEL"
AVERAGE_EPISODE_MINUTES_ENV = "DAH_AVERAGE_EPISODE_MINUTES"

#: Average anime episode length when nothing else is configured.
DEFAULT_AVERAGE_EPISODE_MINUTES = 20.0


@dc.dataclass(frozen=True, slots=True)
class EngineSettings:
    """Runtime settings for one process.

    Attributes
    ----------
    log_level : str | None
        Requested log level, passed through to ``configure_logging``.
    average_episode_minutes : float
        Default episode length used by the standards extension.
    """

    log_level: str | None = None
    average_episode_minutes: float = DEFAULT_AVERAGE_EPISODE_MINUTES


def settings_from_environment(
    environ: cabc.Mapping[str, str] | None = None,
) -> EngineSettings:
    """Build ``EngineSettings`` from ``environ`` (``os.environ`` by default)."""
    env = os.environ if environ is None else environ
    raw_level = env.get(LOG_LEVEL_ENV)
    return EngineSettings(
        log_level=raw_level.strip() if raw_level and raw_level.strip() else None,
        average_episode_minutes=coerce_positive_float(
            env.get(AVERAGE_EPISODE_MINUTES_ENV),
            DEFAULT_AVERAGE_EPISODE_MINUTES,
        ),
    )


__all__ = [
    "AVERAGE_EPISODE_MINUTES_ENV",
    "DEFAULT_AVERAGE_EPISODE_MINUTES",
    "LOG_LEVEL_ENV",
    "EngineSettings",
    "settings_from_environment",
]
