"""Factor registry and the scoring context.

A factor is one scoring dimension. The ``Context`` wraps the full, fixed set
of factors for one aggregation run and is the only authority on vector
dimensionality: every vector and matrix is sized from it. There is no
process-wide registry; each run builds (or receives) its own context and
passes it explicitly.

Examples
--------
Build a context from factor definitions and create vectors sized to it:

>>> context = Context.from_definitions(
...     [FactorDefinition("AP", subscore_weight=0.9), FactorDefinition("AM")]
... )
>>> context.factor("AM").index
1
>>> new_zero_vector(context).tolist()
[0.0, 0.0]
"""

from __future__ import annotations

import dataclasses as dc
import math
import types
import typing as typ

import numpy as np

from dah.errors import UnknownFactorError

from .combine import CombinePolicy

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .linalg import Vector

#: Subscore weight of factors that do not choose their own.
DEFAULT_SUBSCORE_WEIGHT = 0.95


def _check_weights(name: str, factor_weight: float, subscore_weight: float) -> None:
    if not math.isfinite(factor_weight):
        msg = f"Factor {name!r} has non-finite factor_weight {factor_weight!r}."
        raise ValueError(msg)
    if not 0.0 < subscore_weight < 1.0:
        msg = (
            f"Factor {name!r} has subscore_weight {subscore_weight!r} "
            "outside (0, 1)."
        )
        raise ValueError(msg)


@dc.dataclass(frozen=True, slots=True)
class FactorDefinition:
    """A factor catalog entry before indices are assigned.

    Attributes
    ----------
    name : str
        Unique factor name.
    factor_weight : float
        Exponent used by extensions when mapping raw quantities to
        magnitudes.
    subscore_weight : float
        Diminishing-returns weight, strictly between 0 and 1, used by
        ``combine``.
    description : str
        Human-readable summary.
    """

    name: str
    factor_weight: float = 1.0
    subscore_weight: float = DEFAULT_SUBSCORE_WEIGHT
    description: str = ""

    def __post_init__(self) -> None:
        _check_weights(self.name, self.factor_weight, self.subscore_weight)


@dc.dataclass(frozen=True, slots=True)
class Factor:
    """A registered factor with its stable vector index."""

    name: str
    index: int
    factor_weight: float
    subscore_weight: float
    description: str = ""

    def __post_init__(self) -> None:
        _check_weights(self.name, self.factor_weight, self.subscore_weight)


@dc.dataclass(frozen=True, slots=True)
class Context:
    """Immutable handle to the active factor set.

    Factor indices must be unique and contiguous in ``[0, factor_count)``.
    ``factors`` is stored ordered by index. ``combine_policy`` selects the
    closed form used by ``combine`` for every reduction in the run.
    """

    factors: tuple[Factor, ...]
    combine_policy: CombinePolicy = CombinePolicy.RANK_DECAY
    _by_name: cabc.Mapping[str, Factor] = dc.field(
        init=False,
        repr=False,
        compare=False,
    )

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.factors, key=lambda factor: factor.index))
        by_name: dict[str, Factor] = {}
        for position, factor in enumerate(ordered):
            if factor.index != position:
                msg = (
                    "Factor indices must be unique and contiguous from 0; "
                    f"found {factor.name!r} at index {factor.index}, "
                    f"expected {position}."
                )
                raise ValueError(msg)
            if factor.name in by_name:
                msg = f"Duplicate factor name {factor.name!r}."
                raise ValueError(msg)
            by_name[factor.name] = factor
        object.__setattr__(self, "factors", ordered)
        object.__setattr__(self, "_by_name", types.MappingProxyType(by_name))

    @classmethod
    def from_definitions(
        cls,
        definitions: cabc.Iterable[FactorDefinition],
        *,
        combine_policy: CombinePolicy = CombinePolicy.RANK_DECAY,
    ) -> Context:
        """Build a context, assigning indices in declaration order."""
        return cls(
            tuple(
                Factor(
                    name=definition.name,
                    index=index,
                    factor_weight=definition.factor_weight,
                    subscore_weight=definition.subscore_weight,
                    description=definition.description,
                )
                for index, definition in enumerate(definitions)
            ),
            combine_policy=combine_policy,
        )

    @property
    def factor_count(self) -> int:
        """Number of factors, and so the length of every vector."""
        return len(self.factors)

    @property
    def factor_names(self) -> tuple[str, ...]:
        """Factor names ordered by index."""
        return tuple(factor.name for factor in self.factors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def factor(self, name: str) -> Factor:
        """Return the factor registered as ``name``.

        Raises
        ------
        UnknownFactorError
            If no factor has that name.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownFactorError(name) from None

    def vector(self, values: cabc.Mapping[str, float]) -> Vector:
        """Return a vector with ``values`` set by factor name, zero elsewhere."""
        vector = new_zero_vector(self)
        for name, value in values.items():
            vector[self.factor(name).index] = value
        return vector


def new_zero_vector(context: Context) -> Vector:
    """Return a zero-filled vector sized to ``context``."""
    return np.zeros(context.factor_count, dtype=np.float64)


__all__ = [
    "DEFAULT_SUBSCORE_WEIGHT",
    "Context",
    "Factor",
    "FactorDefinition",
    "new_zero_vector",
]
