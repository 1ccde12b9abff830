"""Impact score aggregation for a personal media catalog."""

from .errors import (
    CyclicEntryGraphError,
    DahError,
    DanglingReferenceError,
    DimensionMismatchError,
    EmptyCombineInputError,
    ExtensionDependencyError,
    ExtensionValidationError,
    UnknownFactorError,
)
from .scoring import (
    AggregationResult,
    CombinePolicy,
    Context,
    Data,
    Entry,
    FactorDefinition,
    Impact,
    Relation,
    ScoringPipeline,
    aggregate,
    combine,
    new_zero_vector,
)

__all__: list[str] = [
    "AggregationResult",
    "CombinePolicy",
    "Context",
    "CyclicEntryGraphError",
    "DahError",
    "DanglingReferenceError",
    "Data",
    "DimensionMismatchError",
    "EmptyCombineInputError",
    "Entry",
    "ExtensionDependencyError",
    "ExtensionValidationError",
    "FactorDefinition",
    "Impact",
    "Relation",
    "ScoringPipeline",
    "UnknownFactorError",
    "aggregate",
    "combine",
    "new_zero_vector",
]
