"""Aggregation engine: factors, vectors, combine, and graph propagation.

Examples
--------
Score a two-level graph:

>>> context = Context.from_definitions([FactorDefinition("AP", subscore_weight=0.9)])
>>> child = Entry(id="ost")
>>> root = Entry(id="show", children={"ost": scalar_matrix(context, 0.5)})
>>> impact = Impact(
...     contributors={"ost": identity_matrix(context)},
...     score=context.vector({"AP": 2.0}),
... )
>>> result = aggregate(context, Data.from_entries([root, child], impacts=[impact]))
>>> result.factor_score("show", "AP")
1.0
"""

from .combine import CombinePolicy, WeightFn, combine
from .domain import Data, Entry, Id, Impact, JsonMapping, Relation, index_entries
from .extensions import (
    ScoringPipeline,
    assemble_data,
    build_context,
    collect_contributions,
    resolve_extension_order,
)
from .factors import Context, Factor, FactorDefinition, new_zero_vector
from .linalg import (
    DiagonalMatrix,
    FullMatrix,
    Matrix,
    Vector,
    add_vectors,
    apply_matrix,
    diagonal_matrix,
    identity_matrix,
    map_vector,
    scalar_matrix,
)
from .ports import Extension, FactorProvider
from .propagation import (
    AggregationResult,
    Contribution,
    ContributionKind,
    aggregate,
    combine_vectors,
    evaluation_order,
)

__all__: list[str] = [
    "AggregationResult",
    "CombinePolicy",
    "Context",
    "Contribution",
    "ContributionKind",
    "Data",
    "DiagonalMatrix",
    "Entry",
    "Extension",
    "Factor",
    "FactorDefinition",
    "FactorProvider",
    "FullMatrix",
    "Id",
    "Impact",
    "JsonMapping",
    "Matrix",
    "Relation",
    "ScoringPipeline",
    "Vector",
    "WeightFn",
    "add_vectors",
    "aggregate",
    "apply_matrix",
    "assemble_data",
    "build_context",
    "collect_contributions",
    "combine",
    "combine_vectors",
    "diagonal_matrix",
    "evaluation_order",
    "identity_matrix",
    "index_entries",
    "map_vector",
    "new_zero_vector",
    "resolve_extension_order",
    "scalar_matrix",
]
