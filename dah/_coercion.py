"""Shared coercion helpers for extension and environment configuration values."""

from __future__ import annotations

import math

_COERCE_FLOAT_ERRORS = (TypeError, ValueError)


def coerce_float(value: object, default: float) -> float:
    """Coerce ``value`` to ``float`` and return ``default`` on failure.

    Parameters
    ----------
    value : object
        Candidate value to convert. Only ``int``, ``float``, and ``str``
        values are conversion candidates; booleans and all other input types
        immediately use ``default``.
    default : float
        Fallback value returned when conversion is not possible.

    Returns
    -------
    float
        Converted floating-point value when conversion succeeds; otherwise
        ``default``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return default
    try:
        return float(value)
    except _COERCE_FLOAT_ERRORS:
        return default


def coerce_positive_float(value: object, default: float) -> float:
    """Coerce ``value`` to a strictly positive ``float``.

    Non-positive, non-finite, and unparseable values return ``default``.
    """
    parsed = coerce_float(value, default)
    if not math.isfinite(parsed) or parsed <= 0.0:
        return default
    return parsed
