"""Reference extensions: the standard factor catalog and heuristics."""

from .catalog import CatalogExtension, ContributionBuilder
from .factors import (
    ADDITIONAL,
    ART_FACTORS,
    BOREDOM,
    EMOTION_FACTORS,
    STANDARD_FACTORS,
    StandardFactors,
)
from .standards import (
    DatePeriod,
    DurationPeriod,
    FromToPeriod,
    Sign,
    Standards,
    VisualType,
    map_clamp,
    periods_length,
)

__all__: list[str] = [
    "ADDITIONAL",
    "ART_FACTORS",
    "BOREDOM",
    "EMOTION_FACTORS",
    "STANDARD_FACTORS",
    "CatalogExtension",
    "ContributionBuilder",
    "DatePeriod",
    "DurationPeriod",
    "FromToPeriod",
    "Sign",
    "StandardFactors",
    "Standards",
    "VisualType",
    "map_clamp",
    "periods_length",
]
