"""Extension wrapping catalog-author code.

Catalog authors build impacts and relations with the standard heuristics
once the context exists. ``CatalogExtension`` routes that code through the
extension pipeline so it runs after the extensions it uses.

Examples
--------
>>> standards = Standards()
>>> catalog = CatalogExtension(
...     "my_catalog",
...     lambda context: [standards.cry(context, {"show": 1.0}, [("CP", 1.0)])],
...     dependencies=("DAH_standards",),
... )
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dah.scoring.domain import Impact, Relation
    from dah.scoring.factors import Context

type ContributionBuilder = cabc.Callable[
    [Context],
    cabc.Iterable[Impact | Relation],
]


class CatalogExtension:
    """Extension whose contributions come from a builder callable.

    Parameters
    ----------
    name : str
        Unique extension name.
    build : ContributionBuilder
        Called with the context; returns impacts and relations.
    dependencies : Sequence[str]
        Extensions the builder relies on.
    """

    def __init__(
        self,
        name: str,
        build: ContributionBuilder,
        *,
        dependencies: cabc.Sequence[str] = (),
    ) -> None:
        self.name = name
        self._build = build
        self._dependencies = tuple(dependencies)

    def dependencies(self) -> tuple[str, ...]:
        """Return the declared dependencies."""
        return self._dependencies

    def contribute(self, context: Context) -> list[Impact | Relation]:
        """Run the builder against ``context``."""
        return list(self._build(context))


__all__ = ["CatalogExtension", "ContributionBuilder"]
