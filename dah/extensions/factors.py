"""Standard factor catalog extension.

Publishes the factor set the standard heuristics score against: six
emotion factors, three art factors, boredom, and a free-form additional
factor. ``factor_weight`` is the exponent heuristics use when scaling raw
quantities (days, duration ratios); ``subscore_weight`` drives the
diminishing-returns rule in ``combine``.
"""

from __future__ import annotations

import typing as typ

from dah.scoring.factors import FactorDefinition

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dah.scoring.domain import Impact, Relation
    from dah.scoring.factors import Context

EMOTION_FACTORS: tuple[str, ...] = ("AP", "AU", "CP", "CU", "MP", "MU")
ART_FACTORS: tuple[str, ...] = ("AV", "AL", "AM")
BOREDOM = "Boredom"
ADDITIONAL = "Additional"

STANDARD_FACTORS: tuple[FactorDefinition, ...] = (
    *(
        FactorDefinition(
            name,
            factor_weight=0.9,
            subscore_weight=0.9,
            description=f"Emotion factor {name}.",
        )
        for name in EMOTION_FACTORS
    ),
    FactorDefinition(
        "AV", factor_weight=1.0, subscore_weight=0.8, description="Visual art."
    ),
    FactorDefinition(
        "AL", factor_weight=1.0, subscore_weight=0.8, description="Language art."
    ),
    FactorDefinition(
        "AM", factor_weight=1.0, subscore_weight=0.8, description="Music."
    ),
    FactorDefinition(
        BOREDOM,
        factor_weight=0.5,
        subscore_weight=0.95,
        description="Time spent consuming, scaled by how boring it was.",
    ),
    FactorDefinition(
        ADDITIONAL,
        factor_weight=1.0,
        subscore_weight=0.95,
        description="Bonuses not covered by another factor.",
    ),
)


class StandardFactors:
    """Factor provider for the standard catalog."""

    name = "DAH_factors"

    def __init__(
        self,
        definitions: cabc.Sequence[FactorDefinition] = STANDARD_FACTORS,
    ) -> None:
        self._definitions = tuple(definitions)

    def dependencies(self) -> tuple[str, ...]:  # noqa: PLR6301
        """Return no dependencies; the catalog is the root extension."""
        return ()

    def factor_definitions(self) -> tuple[FactorDefinition, ...]:
        """Return the catalog in index order."""
        return self._definitions

    def contribute(self, context: Context) -> tuple[Impact | Relation, ...]:  # noqa: ARG002, PLR6301
        """Return nothing; the catalog only defines factors."""
        return ()


__all__ = [
    "ADDITIONAL",
    "ART_FACTORS",
    "BOREDOM",
    "EMOTION_FACTORS",
    "STANDARD_FACTORS",
    "StandardFactors",
]
