"""Extension dependency resolution and snapshot assembly.

Extensions declare the names they depend on. Before any scoring runs they
are sorted so each one is initialised after all of its prerequisites;
factor providers then define the context, and every extension contributes
its impacts and relations against it.

Examples
--------
Score a catalog with the standard extensions:

>>> pipeline = ScoringPipeline((StandardFactors(), Standards()))
>>> context = pipeline.build_context()
>>> result = pipeline.run(context, entries, impacts=impacts)
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import networkx as nx

from dah.config import settings_from_environment
from dah.errors import ExtensionDependencyError
from dah.logging import configure_logging, get_logger, log_debug, log_error

from .combine import CombinePolicy
from .domain import Data, Impact, Relation
from .factors import Context
from .ports import FactorProvider
from .propagation import aggregate

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dah.config import EngineSettings

    from .domain import Entry
    from .ports import Extension
    from .propagation import AggregationResult

logger = get_logger(__name__)


def _index_by_name(
    extensions: cabc.Sequence[Extension],
) -> dict[str, Extension]:
    by_name: dict[str, Extension] = {}
    for extension in extensions:
        if extension.name in by_name:
            msg = f"Extension {extension.name!r} is registered more than once."
            log_error(logger, msg)
            raise ExtensionDependencyError(msg, extension=extension.name)
        by_name[extension.name] = extension
    return by_name


def resolve_extension_order(
    extensions: cabc.Sequence[Extension],
) -> list[Extension]:
    """Order ``extensions`` so each follows every extension it depends on.

    Extensions with no ordering constraint between them keep their
    registration order.

    Parameters
    ----------
    extensions : Sequence[Extension]
        Registered extensions, in registration order.

    Returns
    -------
    list[Extension]
        The same extensions in initialisation order.

    Raises
    ------
    ExtensionDependencyError
        If a name is registered twice, a dependency is not registered, or
        the dependencies form a cycle.
    """
    by_name = _index_by_name(extensions)
    position = {name: index for index, name in enumerate(by_name)}

    graph = nx.DiGraph()
    graph.add_nodes_from(by_name)
    for extension in extensions:
        for dependency in extension.dependencies():
            if dependency not in by_name:
                msg = (
                    f"Extension {extension.name!r} depends on {dependency!r}, "
                    "which is not registered."
                )
                log_error(logger, msg)
                raise ExtensionDependencyError(
                    msg,
                    extension=extension.name,
                    missing=dependency,
                )
            graph.add_edge(dependency, extension.name)

    try:
        cycle_edges = nx.find_cycle(graph, orientation="original")
    except nx.NetworkXNoCycle:
        ordered = list(
            nx.lexicographical_topological_sort(graph, key=position.__getitem__),
        )
        log_debug(logger, "Extension order: %s.", ", ".join(ordered))
        return [by_name[name] for name in ordered]

    cycle = [edge[0] for edge in cycle_edges]
    cycle.append(cycle_edges[-1][1])
    msg = f"Extension dependencies form a cycle: {' -> '.join(cycle)}."
    log_error(logger, msg)
    raise ExtensionDependencyError(msg, extension=cycle[0], cycle=cycle)


def build_context(
    extensions: cabc.Sequence[Extension],
    *,
    combine_policy: CombinePolicy = CombinePolicy.RANK_DECAY,
) -> Context:
    """Build the context from every factor provider, in dependency order."""
    definitions = [
        definition
        for extension in resolve_extension_order(extensions)
        if isinstance(extension, FactorProvider)
        for definition in extension.factor_definitions()
    ]
    return Context.from_definitions(definitions, combine_policy=combine_policy)


def collect_contributions(
    context: Context,
    extensions: cabc.Sequence[Extension],
) -> tuple[tuple[Impact, ...], tuple[Relation, ...]]:
    """Gather every impact and relation the extensions contribute.

    Raises
    ------
    TypeError
        If an extension contributes something other than an impact or a
        relation.
    """
    impacts: list[Impact] = []
    relations: list[Relation] = []
    for extension in resolve_extension_order(extensions):
        for item in extension.contribute(context):
            if isinstance(item, Impact):
                impacts.append(item)
            elif isinstance(item, Relation):
                relations.append(item)
            else:
                msg = (
                    f"Extension {extension.name!r} contributed "
                    f"{type(item).__name__}, expected Impact or Relation."
                )
                raise TypeError(msg)
    return (tuple(impacts), tuple(relations))


def assemble_data(
    context: Context,
    entries: cabc.Iterable[Entry],
    extensions: cabc.Sequence[Extension],
    *,
    impacts: cabc.Iterable[Impact] = (),
    relations: cabc.Iterable[Relation] = (),
) -> Data:
    """Build a snapshot from ``entries``, explicit values, and extension output."""
    contributed_impacts, contributed_relations = collect_contributions(
        context, extensions
    )
    return Data.from_entries(
        entries,
        impacts=(*impacts, *contributed_impacts),
        relations=(*relations, *contributed_relations),
    )


@dc.dataclass(frozen=True, slots=True)
class ScoringPipeline:
    """Bundles the registered extensions for repeated scoring runs.

    Attributes
    ----------
    extensions : tuple[Extension, ...]
        Registered extensions, in registration order.
    combine_policy : CombinePolicy
        Closed form used by ``combine`` in contexts built by this pipeline.
    """

    extensions: tuple[Extension, ...]
    combine_policy: CombinePolicy = CombinePolicy.RANK_DECAY

    @classmethod
    def from_settings(
        cls,
        extensions: cabc.Iterable[Extension],
        settings: EngineSettings | None = None,
        *,
        combine_policy: CombinePolicy = CombinePolicy.RANK_DECAY,
    ) -> ScoringPipeline:
        """Configure logging from ``settings`` and bundle ``extensions``.

        When ``settings`` is None they are read from the environment.
        """
        resolved = settings_from_environment() if settings is None else settings
        configure_logging(resolved)
        return cls(tuple(extensions), combine_policy)

    def build_context(self) -> Context:
        """Resolve the extensions and build the context from their factors."""
        return build_context(self.extensions, combine_policy=self.combine_policy)

    def run(
        self,
        context: Context,
        entries: cabc.Iterable[Entry],
        *,
        impacts: cabc.Iterable[Impact] = (),
        relations: cabc.Iterable[Relation] = (),
    ) -> AggregationResult:
        """Assemble a snapshot and aggregate it."""
        data = assemble_data(
            context,
            entries,
            self.extensions,
            impacts=impacts,
            relations=relations,
        )
        return aggregate(context, data)


__all__ = [
    "ScoringPipeline",
    "assemble_data",
    "build_context",
    "collect_contributions",
    "resolve_extension_order",
]
