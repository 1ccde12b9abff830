"""Diminishing-returns combination of contribution magnitudes.

``combine`` merges several independent magnitudes into one number that
represents their joint effect. Every per-factor aggregation in the engine,
and every multi-emotion impact built by the standard extensions, routes
through it.

The laws every policy satisfies:

- a single value is returned unchanged;
- zero values contribute nothing;
- the result grows with each input and with each additional positive
  input, yet stays strictly below the plain sum for two or more positive
  inputs;
- the result does not depend on input order.

Positive and negative magnitudes are reduced separately and the negative
total is subtracted, so bonuses and penalties diminish only among
themselves.

Two policies are available, selected by ``Context.combine_policy``:

``RANK_DECAY``
    Magnitudes are ranked from largest to smallest and the ``k``-th one
    (zero-based) is scaled by ``w ** k``. With ``w = 0.95`` this is the
    familiar "weighted top plays" total.
``POWER``
    The ``p``-norm of the magnitudes with ``p = 1 / w``.

Weights lie strictly between 0 and 1. When several inputs carry different
weights, both policies decay with the smallest of them, so raising one input
never lowers the result.

Examples
--------
>>> combine(context, [2.0, 2.0], 0.5)
3.0
>>> combine(context, [2.0], 0.5)
2.0
"""

from __future__ import annotations

import enum
import math
import typing as typ

from dah.errors import EmptyCombineInputError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .factors import Context

type WeightFn = cabc.Callable[[int], float]

_Term = tuple[float, float]


class CombinePolicy(enum.StrEnum):
    """Closed forms available for ``combine``."""

    RANK_DECAY = "rank_decay"
    POWER = "power"


def _weight_function(weight: float | WeightFn) -> WeightFn:
    if callable(weight):
        return weight
    constant = float(weight)
    return lambda _position: constant


def _checked_weight(weight: float, position: int) -> float:
    if not 0.0 < weight < 1.0:
        msg = f"Combine weight {weight!r} at position {position} is outside (0, 1)."
        raise ValueError(msg)
    return weight


def _rank_decay(magnitudes: list[float], weight: float) -> float:
    ranked = sorted(magnitudes, reverse=True)
    return math.fsum(magnitude * weight**rank for rank, magnitude in enumerate(ranked))


def _power(magnitudes: list[float], weight: float) -> float:
    if len(magnitudes) == 1:
        return magnitudes[0]
    # Scaled by the largest magnitude so large exponents cannot overflow.
    largest = max(magnitudes)
    exponent = 1.0 / weight
    total = math.fsum((magnitude / largest) ** exponent for magnitude in magnitudes)
    return largest * total**weight


_REDUCERS: dict[CombinePolicy, cabc.Callable[[list[float], float], float]] = {
    CombinePolicy.RANK_DECAY: _rank_decay,
    CombinePolicy.POWER: _power,
}


def _reduce(context: Context, terms: list[_Term]) -> float:
    if not terms:
        return 0.0
    reduce = _REDUCERS[context.combine_policy]
    return reduce([magnitude for magnitude, _ in terms], min(w for _, w in terms))


def combine(
    context: Context,
    values: cabc.Sequence[float],
    weight: float | WeightFn,
) -> float:
    """Merge ``values`` into a single magnitude with diminishing returns.

    Parameters
    ----------
    context : Context
        Active context; its ``combine_policy`` selects the closed form.
    values : Sequence[float]
        Contribution magnitudes. Order does not matter.
    weight : float | Callable[[int], float]
        Either a constant weight, or a function mapping a value's position in
        ``values`` to its weight. Weights must lie strictly between 0 and
        1; lower weights diminish additional contributions more strongly.
        Inputs with different weights decay with the smallest of them.

    Returns
    -------
    float
        The combined magnitude.

    Raises
    ------
    EmptyCombineInputError
        If ``values`` is empty.
    ValueError
        If a weight is not strictly between 0 and 1.
    """
    if len(values) == 0:
        raise EmptyCombineInputError
    weight_of = _weight_function(weight)
    positive: list[_Term] = []
    negative: list[_Term] = []
    for position, raw in enumerate(values):
        value = float(raw)
        if value == 0.0:
            continue
        term = (abs(value), _checked_weight(float(weight_of(position)), position))
        (positive if value > 0.0 else negative).append(term)

    return _reduce(context, positive) - _reduce(context, negative)


__all__ = ["CombinePolicy", "WeightFn", "combine"]
