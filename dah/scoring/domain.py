"""Entity graph model aggregated by the engine.

Entries are the nodes of the consumption graph; each maps child ids to the
matrix that carries the child's final score into its own. Impacts are
direct contributions with their own score vector. Relations carry scores
between entries that are not parent and child. ``Data`` is the immutable
snapshot handed to ``aggregate``.

``dah_meta`` on every entity is an opaque provenance payload. The engine
never reads it; it is passed through to results for audit trails.

Examples
--------
Assemble a snapshot with one entry and one impact:

>>> entry = Entry(id="show", children={})
>>> impact = Impact(
...     contributors={"show": identity_matrix(context)},
...     score=context.vector({"AP": 3.5}),
... )
>>> data = Data.from_entries([entry], impacts=[impact])
"""

from __future__ import annotations

import dataclasses as dc
import types
import typing as typ

from .linalg import as_vector, freeze

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .linalg import Matrix, Vector

type Id = str
type JsonMapping = dict[str, object]


def _frozen_edges(
    edges: cabc.Mapping[Id, Matrix],
) -> cabc.Mapping[Id, Matrix]:
    return types.MappingProxyType(dict(edges))


@dc.dataclass(frozen=True, slots=True, eq=False)
class Entry:
    """A consumed-media node.

    Attributes
    ----------
    id : Id
        Identifier, unique within a snapshot.
    children : Mapping[Id, Matrix]
        Child id to the matrix applied to the child's score.
    dah_meta : JsonMapping
        Provenance payload passed through unmodified.
    """

    id: Id
    children: cabc.Mapping[Id, Matrix] = dc.field(default_factory=dict)
    dah_meta: JsonMapping = dc.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", _frozen_edges(self.children))


@dc.dataclass(frozen=True, slots=True, eq=False)
class Impact:
    """A direct scoring contribution.

    Attributes
    ----------
    contributors : Mapping[Id, Matrix]
        Entries receiving this impact, with the matrix applied to ``score``
        for each of them.
    score : Vector
        Magnitude per factor. Read-only once the impact is built.
    dah_meta : JsonMapping
        Provenance payload passed through unmodified.
    """

    contributors: cabc.Mapping[Id, Matrix]
    score: Vector
    dah_meta: JsonMapping = dc.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "contributors", _frozen_edges(self.contributors))
        object.__setattr__(self, "score", freeze(as_vector(self.score)))


@dc.dataclass(frozen=True, slots=True, eq=False)
class Relation:
    """A cross-reference from ``contributors`` to ``references``.

    The relation's magnitude is derived from the final scores of the
    referenced entries, each transformed by its reference matrix, and is
    then applied to each contributor through its contributor matrix.
    """

    contributors: cabc.Mapping[Id, Matrix]
    references: cabc.Mapping[Id, Matrix]
    dah_meta: JsonMapping = dc.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "contributors", _frozen_edges(self.contributors))
        object.__setattr__(self, "references", _frozen_edges(self.references))


def index_entries(entries: cabc.Iterable[Entry]) -> dict[Id, Entry]:
    """Map entry ids to entries.

    Duplicate ids are last-write-wins: a later entry replaces an earlier one
    with the same id. Callers that treat duplicates as an error must check
    uniqueness first.
    """
    index: dict[Id, Entry] = {}
    for entry in entries:
        index[entry.id] = entry
    return index


@dc.dataclass(frozen=True, slots=True, eq=False)
class Data:
    """Full snapshot consumed by one aggregation run.

    Attributes
    ----------
    entries : Mapping[Id, Entry]
        Every entry keyed by its id.
    impacts : tuple[Impact, ...]
        Direct contributions.
    relations : tuple[Relation, ...]
        Cross-references between entries.
    """

    entries: cabc.Mapping[Id, Entry]
    impacts: tuple[Impact, ...] = ()
    relations: tuple[Relation, ...] = ()

    def __post_init__(self) -> None:
        for key, entry in self.entries.items():
            if key != entry.id:
                msg = f"Entry keyed as {key!r} has id {entry.id!r}."
                raise ValueError(msg)
        object.__setattr__(
            self, "entries", types.MappingProxyType(dict(self.entries))
        )
        object.__setattr__(self, "impacts", tuple(self.impacts))
        object.__setattr__(self, "relations", tuple(self.relations))

    @classmethod
    def from_entries(
        cls,
        entries: cabc.Iterable[Entry],
        *,
        impacts: cabc.Iterable[Impact] = (),
        relations: cabc.Iterable[Relation] = (),
    ) -> Data:
        """Build a snapshot, indexing ``entries`` with ``index_entries``."""
        return cls(
            entries=index_entries(entries),
            impacts=tuple(impacts),
            relations=tuple(relations),
        )

    def referenced_ids(self) -> cabc.Iterator[tuple[Id, str]]:
        """Yield every referenced id with a description of its referrer."""
        for entry in self.entries.values():
            for child_id in entry.children:
                yield (child_id, f"children of entry {entry.id!r}")
        for position, impact in enumerate(self.impacts):
            for contributor_id in impact.contributors:
                yield (contributor_id, f"contributors of impact #{position}")
        for position, relation in enumerate(self.relations):
            for contributor_id in relation.contributors:
                yield (contributor_id, f"contributors of relation #{position}")
            for reference_id in relation.references:
                yield (reference_id, f"references of relation #{position}")

    def edge_matrices(self) -> cabc.Iterator[tuple[Matrix, str]]:
        """Yield every edge matrix with a description of where it sits."""
        for entry in self.entries.values():
            for child_id, matrix in entry.children.items():
                yield (matrix, f"edge {entry.id!r} -> {child_id!r}")
        for position, impact in enumerate(self.impacts):
            for contributor_id, matrix in impact.contributors.items():
                yield (matrix, f"impact #{position} -> {contributor_id!r}")
        for position, relation in enumerate(self.relations):
            for contributor_id, matrix in relation.contributors.items():
                yield (matrix, f"relation #{position} -> {contributor_id!r}")
            for reference_id, matrix in relation.references.items():
                yield (matrix, f"relation #{position} <- {reference_id!r}")


__all__ = [
    "Data",
    "Entry",
    "Id",
    "Impact",
    "JsonMapping",
    "Relation",
    "index_entries",
]
