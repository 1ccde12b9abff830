"""Propagation engine: turn a ``Data`` snapshot into per-entry scores.

Each run is a full recomputation. The engine

1. checks that every vector and matrix matches the context dimension;
2. checks that every referenced id names an entry;
3. orders entries so that each one follows everything it depends on
   (its children, and the entries referenced by relations it receives),
   failing on any cycle;
4. scores each entry by combining, factor by factor, its impacts, its
   relations, and its children's scores transformed by the edge matrices.

Any failure aborts the run; no partial result is returned.

Examples
--------
>>> result = aggregate(context, data)
>>> result.factor_score("show", "AP")
3.5
"""

from __future__ import annotations

import collections
import dataclasses as dc
import enum
import types
import typing as typ

import networkx as nx
import numpy as np

from dah.errors import (
    CyclicEntryGraphError,
    DanglingReferenceError,
    DimensionMismatchError,
)
from dah.logging import get_logger, log_debug, log_error, log_info

from .combine import combine
from .factors import new_zero_vector
from .linalg import apply_matrix, freeze

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .domain import Data, Id, Impact, JsonMapping, Relation
    from .factors import Context
    from .linalg import Matrix, Vector

logger = get_logger(__name__)


class ContributionKind(enum.StrEnum):
    """Origin of a vector that entered an entry's aggregation."""

    IMPACT = "impact"
    RELATION = "relation"
    CHILD = "child"


@dc.dataclass(frozen=True, slots=True, eq=False)
class Contribution:
    """One transformed vector combined into an entry's score.

    Attributes
    ----------
    kind : ContributionKind
        Whether the vector came from an impact, a relation, or a child.
    source_id : Id | None
        The child id for ``CHILD`` contributions, otherwise ``None``.
    dah_meta : JsonMapping
        Provenance of the contributing impact, relation, or child entry.
    vector : Vector
        The vector after the edge matrix was applied.
    """

    kind: ContributionKind
    source_id: Id | None
    dah_meta: JsonMapping
    vector: Vector


@dc.dataclass(frozen=True, slots=True, eq=False)
class AggregationResult:
    """Scores and audit trail produced by one ``aggregate`` run.

    Attributes
    ----------
    context : Context
        The context the scores were computed in.
    scores : Mapping[Id, Vector]
        Final, read-only score vector per entry id.
    entry_meta : Mapping[Id, JsonMapping]
        Each entry's ``dah_meta``, passed through.
    contributions : Mapping[Id, tuple[Contribution, ...]]
        The vectors combined into each entry's score.
    order : tuple[Id, ...]
        Evaluation order; every entry follows its dependencies.
    """

    context: Context
    scores: cabc.Mapping[Id, Vector]
    entry_meta: cabc.Mapping[Id, JsonMapping]
    contributions: cabc.Mapping[Id, tuple[Contribution, ...]]
    order: tuple[Id, ...]

    def score(self, entry_id: Id) -> Vector:
        """Return the final score vector of ``entry_id``."""
        return self.scores[entry_id]

    def factor_score(self, entry_id: Id, factor_name: str) -> float:
        """Return the final score of ``entry_id`` on one factor."""
        factor = self.context.factor(factor_name)
        return float(self.scores[entry_id][factor.index])


def _dimensions(data: Data) -> cabc.Iterator[tuple[int, str, str]]:
    for position, impact in enumerate(data.impacts):
        yield (impact.score.shape[0], "impact score", f"impact #{position}")
    for matrix, where in data.edge_matrices():
        yield (matrix.dimension, "matrix", where)


def _check_dimensions(context: Context, data: Data) -> None:
    expected = context.factor_count
    for actual, what, where in _dimensions(data):
        if actual != expected:
            log_error(logger, "Dimension mismatch in %s.", where)
            raise DimensionMismatchError(expected, actual, what=what)


def _check_references(data: Data) -> None:
    for entry_id, referrer in data.referenced_ids():
        if entry_id not in data.entries:
            log_error(logger, "Dangling reference %r in %s.", entry_id, referrer)
            raise DanglingReferenceError(entry_id, referrer=referrer)


def _dependency_graph(data: Data) -> nx.DiGraph:
    """Build the graph with an edge from each entry to what it depends on."""
    graph = nx.DiGraph()
    graph.add_nodes_from(data.entries)
    for entry in data.entries.values():
        graph.add_edges_from((entry.id, child_id) for child_id in entry.children)
    for relation in data.relations:
        graph.add_edges_from(
            (contributor_id, reference_id)
            for contributor_id in relation.contributors
            for reference_id in relation.references
        )
    return graph


def evaluation_order(data: Data) -> tuple[Id, ...]:
    """Return entry ids ordered so dependencies come first.

    Raises
    ------
    CyclicEntryGraphError
        If an entry depends on itself, directly or transitively. The error
        carries the cycle as a sequence of ids starting and ending with the
        same id.
    """
    graph = _dependency_graph(data)
    try:
        cycle_edges = nx.find_cycle(graph, orientation="original")
    except nx.NetworkXNoCycle:
        return tuple(reversed(list(nx.topological_sort(graph))))
    cycle = [edge[0] for edge in cycle_edges]
    cycle.append(cycle_edges[-1][1])
    log_error(logger, "Cyclic entry graph: %s.", " -> ".join(cycle))
    raise CyclicEntryGraphError(cycle)


def combine_vectors(context: Context, vectors: cabc.Sequence[Vector]) -> Vector:
    """Combine ``vectors`` factor by factor using each factor's subscore weight.

    An empty sequence yields the zero vector.
    """
    result = new_zero_vector(context)
    if not vectors:
        return result
    stacked = np.vstack(vectors)
    for factor in context.factors:
        result[factor.index] = combine(
            context,
            stacked[:, factor.index].tolist(),
            factor.subscore_weight,
        )
    return result


def _incoming(
    data: Data,
) -> tuple[
    dict[Id, list[tuple[Impact, Matrix]]],
    dict[Id, list[tuple[int, Matrix]]],
]:
    impacts: dict[Id, list[tuple[Impact, Matrix]]] = collections.defaultdict(list)
    relations: dict[Id, list[tuple[int, Matrix]]] = collections.defaultdict(list)
    for impact in data.impacts:
        for contributor_id, matrix in impact.contributors.items():
            impacts[contributor_id].append((impact, matrix))
    for position, relation in enumerate(data.relations):
        for contributor_id, matrix in relation.contributors.items():
            relations[contributor_id].append((position, matrix))
    return (impacts, relations)


def _relation_vector(
    context: Context,
    relation: Relation,
    scores: cabc.Mapping[Id, Vector],
) -> Vector:
    return combine_vectors(
        context,
        [
            apply_matrix(matrix, scores[reference_id])
            for reference_id, matrix in relation.references.items()
        ],
    )


def aggregate(context: Context, data: Data) -> AggregationResult:
    """Compute the final score vector of every entry in ``data``.

    Parameters
    ----------
    context : Context
        Active factor set; sizes every vector.
    data : Data
        Full snapshot of entries, impacts, and relations.

    Returns
    -------
    AggregationResult
        Scores, pass-through metadata, and per-entry contributions.

    Raises
    ------
    DimensionMismatchError
        If any vector or matrix does not match ``context``.
    DanglingReferenceError
        If any referenced id is not an entry of ``data``.
    CyclicEntryGraphError
        If entries depend on each other in a cycle.
    """
    _check_dimensions(context, data)
    _check_references(data)
    order = evaluation_order(data)
    impacts_by_entry, relations_by_entry = _incoming(data)

    scores: dict[Id, Vector] = {}
    contributions: dict[Id, tuple[Contribution, ...]] = {}
    relation_vectors: dict[int, Vector] = {}
    for entry_id in order:
        entry = data.entries[entry_id]
        gathered = [
            Contribution(
                kind=ContributionKind.IMPACT,
                source_id=None,
                dah_meta=impact.dah_meta,
                vector=freeze(apply_matrix(matrix, impact.score)),
            )
            for impact, matrix in impacts_by_entry.get(entry_id, ())
        ]
        for position, matrix in relations_by_entry.get(entry_id, ()):
            relation = data.relations[position]
            if position not in relation_vectors:
                relation_vectors[position] = _relation_vector(
                    context, relation, scores
                )
            gathered.append(
                Contribution(
                    kind=ContributionKind.RELATION,
                    source_id=None,
                    dah_meta=relation.dah_meta,
                    vector=freeze(apply_matrix(matrix, relation_vectors[position])),
                ),
            )
        gathered.extend(
            Contribution(
                kind=ContributionKind.CHILD,
                source_id=child_id,
                dah_meta=data.entries[child_id].dah_meta,
                vector=freeze(apply_matrix(matrix, scores[child_id])),
            )
            for child_id, matrix in entry.children.items()
        )
        scores[entry_id] = freeze(
            combine_vectors(context, [item.vector for item in gathered]),
        )
        contributions[entry_id] = tuple(gathered)
        log_debug(
            logger,
            "Scored entry %r from %s contributions.",
            entry_id,
            len(gathered),
        )

    log_info(
        logger,
        "Aggregated %s entries from %s impacts and %s relations.",
        len(data.entries),
        len(data.impacts),
        len(data.relations),
    )
    return AggregationResult(
        context=context,
        scores=types.MappingProxyType(scores),
        entry_meta=types.MappingProxyType(
            {entry_id: data.entries[entry_id].dah_meta for entry_id in data.entries},
        ),
        contributions=types.MappingProxyType(contributions),
        order=order,
    )


__all__ = [
    "AggregationResult",
    "Contribution",
    "ContributionKind",
    "aggregate",
    "combine_vectors",
    "evaluation_order",
]
